"""Shape helpers shared by the table and chart substitutors."""

from dataclasses import dataclass

from pptx.util import Emu


@dataclass
class Box:
    """Position and size of a shape, in EMU."""
    left: int
    top: int
    width: int
    height: int

    @classmethod
    def of(cls, shape) -> "Box":
        return cls(left=int(shape.left or 0), top=int(shape.top or 0),
                   width=int(shape.width or 0), height=int(shape.height or 0))

    @property
    def origin(self) -> tuple[Emu, Emu]:
        return Emu(self.left), Emu(self.top)


def remove_shape(shape) -> None:
    """Delete a shape from its slide's shape tree."""
    element = shape._element
    parent = element.getparent()
    if parent is not None:
        parent.remove(element)
