from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class ViewInstructions:
    show_input_preview: bool
    show_concept_preview: bool
    generate_enabled: bool
    show_loader: bool
    show_result_placeholder: bool
    show_result_image: bool
    input_preview_data_uri: Optional[str] = None
    concept_preview_data_uri: Optional[str] = None
    result_image_data_uri: Optional[str] = None
    result_text: Optional[str] = None
    service_available: bool = True

    def to_dict(self):
        """camelCase keys, the shape the page script reads."""
        return {_camel(key): value for key, value in asdict(self).items()}


def project(state, service_available=True) -> ViewInstructions:
    """Everything the view shows, derived from one AppState snapshot."""
    loading = state.is_loading
    result_image = state.result.image

    return ViewInstructions(
        show_input_preview=state.input_image is not None,
        show_concept_preview=state.concept_image is not None,
        input_preview_data_uri=state.input_image.data_uri if state.input_image else None,
        concept_preview_data_uri=state.concept_image.data_uri if state.concept_image else None,
        generate_enabled=service_available and state.has_both_images and not loading,
        show_loader=loading,
        show_result_placeholder=not loading and result_image is None,
        show_result_image=not loading and result_image is not None,
        result_image_data_uri=result_image.data_uri if result_image else None,
        result_text=None if loading else state.result.text,
        service_available=service_available,
    )


def _camel(name):
    head, *rest = name.split("_")
    return head + "".join(word.title() for word in rest)
