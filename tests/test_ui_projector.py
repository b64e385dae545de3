import itertools

import pytest

from app_state import AppState, EncodedImage, GenerationResult
from ui_projector import project

IMAGE = EncodedImage("QUJD", "image/png")


@pytest.mark.parametrize("input_set, concept_set, loading", list(itertools.product([False, True], repeat=3)))
def test_generate_enabled_truth_table(input_set, concept_set, loading):
    state = AppState(
        input_image=IMAGE if input_set else None,
        concept_image=IMAGE if concept_set else None,
        is_loading=loading,
    )
    assert project(state).generate_enabled is (input_set and concept_set and not loading)


def test_generate_disabled_without_service():
    state = AppState(input_image=IMAGE, concept_image=IMAGE)
    view = project(state, service_available=False)
    assert not view.generate_enabled
    assert not view.service_available


def test_idle_empty():
    view = project(AppState())
    assert not view.show_input_preview
    assert not view.show_concept_preview
    assert not view.show_loader
    assert view.show_result_placeholder
    assert not view.show_result_image
    assert view.result_image_data_uri is None
    assert view.result_text is None


def test_previews():
    view = project(AppState(input_image=IMAGE))
    assert view.show_input_preview
    assert view.input_preview_data_uri == "data:image/png;base64,QUJD"
    assert view.concept_preview_data_uri is None


def test_loading_hides_result_area():
    view = project(AppState(input_image=IMAGE, concept_image=IMAGE, is_loading=True))
    assert view.show_loader
    assert not view.show_result_placeholder
    assert not view.show_result_image
    assert view.result_text is None


def test_result_with_image_and_text():
    result = GenerationResult(image=EncodedImage("UE5H", "image/png"), text="Applied impressionist palette")
    view = project(AppState(result=result))
    assert view.show_result_image
    assert not view.show_result_placeholder
    assert view.result_image_data_uri == "data:image/png;base64,UE5H"
    assert view.result_text == "Applied impressionist palette"


def test_failure_text_keeps_placeholder():
    view = project(AppState(result=GenerationResult(text="Generation failed.")))
    assert view.show_result_placeholder
    assert not view.show_result_image
    assert view.result_text == "Generation failed."


def test_to_dict_uses_camel_case():
    data = project(AppState()).to_dict()
    assert set(data) == {
        "showInputPreview", "showConceptPreview", "generateEnabled", "showLoader",
        "showResultPlaceholder", "showResultImage", "inputPreviewDataUri",
        "conceptPreviewDataUri", "resultImageDataUri", "resultText", "serviceAvailable",
    }
