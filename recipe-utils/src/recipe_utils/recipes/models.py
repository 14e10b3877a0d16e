"""Data model of a structured recipe."""

import dataclasses
import json
from typing import Any, Dict, List, Optional

# Value of Recipe.number_of_people when the servings could not be determined
UNKNOWN_SERVINGS = -1


@dataclasses.dataclass(frozen=True)
class TextSpan:
    """A half-open [begin, end) range of offsets into a description."""

    begin: int
    end: int

    def __post_init__(self):
        if self.begin < 0 or self.end < self.begin:
            raise ValueError(f"Invalid span [{self.begin}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.begin

    def contains(self, other: "TextSpan") -> bool:
        """Check if ``other`` lies entirely within this span."""
        return self.begin <= other.begin and other.end <= self.end

    def is_whole_range(self, text_length: int) -> bool:
        """Check if this span is the sentinel covering a whole text."""
        return self.begin == 0 and self.end == text_length

    def to_list(self) -> List[int]:
        return [self.begin, self.end]

    @classmethod
    def from_list(cls, values) -> "TextSpan":
        begin, end = values
        return cls(int(begin), int(end))


@dataclasses.dataclass
class Ingredient:
    """An ingredient with its quantity for ``Recipe.number_of_people`` servings.

    ``quantity_position`` is the range of the owning step's description where
    the quantity is written. The whole-range span ``(0, len(description))``
    means the quantity does not appear in the step text.
    """

    name: str
    quantity: float
    unit: str = ""
    quantity_position: Optional[TextSpan] = None

    def has_inline_quantity(self, description_length: int) -> bool:
        if self.quantity_position is None:
            return False
        return not self.quantity_position.is_whole_range(description_length)

    def to_dict(self) -> Dict[str, Any]:
        data = {"name": self.name, "quantity": self.quantity, "unit": self.unit}
        if self.quantity_position is not None:
            data["quantity_position"] = self.quantity_position.to_list()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ingredient":
        position = data.get("quantity_position")
        return cls(
            name=data["name"],
            quantity=float(data.get("quantity", 0.0)),
            unit=data.get("unit") or "",
            quantity_position=TextSpan.from_list(position) if position else None,
        )


@dataclasses.dataclass
class Timer:
    """A timer mentioned in a step. Bounds are in seconds."""

    position: TextSpan
    lower_bound: int = 0
    upper_bound: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_list(),
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Timer":
        lower = int(data.get("lower_bound", 0))
        return cls(
            position=TextSpan.from_list(data["position"]),
            lower_bound=lower,
            upper_bound=int(data.get("upper_bound", lower)),
        )


@dataclasses.dataclass
class RecipeStep:
    description: str
    ingredients: List[Ingredient] = dataclasses.field(default_factory=list)
    timers: List[Timer] = dataclasses.field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
            "timers": [timer.to_dict() for timer in self.timers],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecipeStep":
        description = data["description"]
        ingredients = []
        for item in data.get("ingredients", []):
            ingredient = Ingredient.from_dict(item)
            if ingredient.quantity_position is None:
                ingredient.quantity_position = TextSpan(0, len(description))
            ingredients.append(ingredient)
        return cls(
            description=description,
            ingredients=ingredients,
            timers=[Timer.from_dict(item) for item in data.get("timers", [])],
        )


@dataclasses.dataclass
class Recipe:
    """Dataclass for holding a structured recipe."""

    steps: List[RecipeStep]
    ingredients: List[Ingredient]
    number_of_people: int = UNKNOWN_SERVINGS
    description: str = ""

    def has_servings(self) -> bool:
        # Zero or negative servings are treated as not found
        return self.number_of_people is not None and self.number_of_people > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "number_of_people": self.number_of_people,
            "ingredients": [ingredient.to_dict() for ingredient in self.ingredients],
            "steps": [step.to_dict() for step in self.steps],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        servings = data.get("number_of_people")
        return cls(
            steps=[RecipeStep.from_dict(item) for item in data.get("steps", [])],
            ingredients=[
                Ingredient.from_dict(item) for item in data.get("ingredients", [])
            ],
            number_of_people=UNKNOWN_SERVINGS if servings is None else int(servings),
            description=data.get("description") or "",
        )


@dataclasses.dataclass
class ExtractedText:
    """A raw document as handed to the extractor."""

    title: str = ""
    sections: List[str] = dataclasses.field(default_factory=list)

    @classmethod
    def from_json(cls, text: str) -> "ExtractedText":
        """Parse the JSON form of an extracted document.

        Args:
            text: JSON object with an optional ``title`` and a ``sections`` list.
                Each section is either a string or an object with a ``body``.

        Raises:
            ValueError: If the text is not a JSON object.
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Extracted text must be a JSON object")
        sections = []
        for section in data.get("sections", []):
            if isinstance(section, dict):
                sections.append(section.get("body", ""))
            else:
                sections.append(str(section))
        return cls(title=data.get("title", ""), sections=sections)

    def to_json(self) -> str:
        return json.dumps({"title": self.title, "sections": self.sections})
