"""Right-aligned padding of line numbers."""

from __future__ import annotations


class NumberPadder:
    """Pads numbers so they all take as many columns as the largest one."""

    def __init__(self, upper_bound: int) -> None:
        if upper_bound < 0:
            raise ValueError("upper bound must not be negative")
        self.width = len(str(upper_bound)) if upper_bound > 0 else 0

    def pad_right(self, number: int) -> str:
        """Render ``number`` right aligned within the padder's width."""
        if number <= 0:
            raise ValueError("only positive numbers can be padded")
        rendered = str(number)
        if len(rendered) > self.width:
            raise ValueError(f"{number} is wider than {self.width} columns")
        return rendered.rjust(self.width)