from dataclasses import dataclass, field, replace
from typing import Optional

ROLES = ("input", "concept")


@dataclass(frozen=True)
class EncodedImage:
    data: str
    mime_type: str

    def __post_init__(self):
        if not self.mime_type.startswith("image/"):
            raise ValueError(f"Not an image MIME type: {self.mime_type!r}")
        if not self.data:
            raise ValueError("Encoded image data is empty")

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class GenerationResult:
    image: Optional[EncodedImage] = None
    text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.image is None and self.text is None


@dataclass
class AppState:
    """The one mutable record of a session.

    Mutate it only through `set_image`, `begin_generation` and
    `complete_generation`; each runs start to finish without awaiting.
    """

    input_image: Optional[EncodedImage] = None
    concept_image: Optional[EncodedImage] = None
    is_loading: bool = False
    result: GenerationResult = field(default_factory=GenerationResult)

    def image(self, role: str) -> Optional[EncodedImage]:
        _check_role(role)
        return self.input_image if role == "input" else self.concept_image

    def set_image(self, role: str, image: EncodedImage) -> None:
        _check_role(role)
        if role == "input":
            self.input_image = image
        else:
            self.concept_image = image

    @property
    def has_both_images(self) -> bool:
        return self.input_image is not None and self.concept_image is not None

    def begin_generation(self) -> None:
        if self.is_loading:
            raise RuntimeError("A generation is already in flight")
        self.result = GenerationResult()
        self.is_loading = True

    def complete_generation(self, result: GenerationResult) -> None:
        self.result = result
        self.is_loading = False

    def snapshot(self) -> "AppState":
        # Fields hold frozen values, so a shallow copy is a consistent snapshot.
        return replace(self)


def _check_role(role):
    if role not in ROLES:
        raise ValueError(f"Unknown image role: {role!r}")
