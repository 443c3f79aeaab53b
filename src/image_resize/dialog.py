"""Resize dialogs: where a resize choice comes from.

The service only needs something that turns an image context into a
ResizeChoice (or None when the user backs out). The command line offers two:
a preset built from options, and an interactive prompt.
"""

from typing import Protocol

import click

from .models import ImageContext, ResizeChoice, ResizeMode, SyntaxKind


class ResizeDialog(Protocol):
    def ask(self, context: ImageContext, default_mode: ResizeMode) -> ResizeChoice | None: ...


class PresetDialog:
    """Answers with a choice fixed up front.

    Alt text left as None keeps the image's current alt text, and a title
    left as None keeps its current title.
    """

    def __init__(
        self,
        target: SyntaxKind = SyntaxKind.HTML,
        mode: ResizeMode | None = None,
        percentage: float | None = None,
        width: int | None = None,
        height: int | None = None,
        alt_text: str | None = None,
        title: str | None = None,
    ):
        self.target = target
        self.mode = mode
        self.percentage = percentage
        self.width = width
        self.height = height
        self.alt_text = alt_text
        self.title = title

    def ask(self, context: ImageContext, default_mode: ResizeMode) -> ResizeChoice:
        mode = self.mode
        if mode is None:
            if self.width or self.height:
                mode = ResizeMode.ABSOLUTE
            elif self.percentage is not None:
                mode = ResizeMode.PERCENTAGE
            else:
                mode = default_mode

        alt_text = self.alt_text
        if alt_text is None:
            alt_text = context.reference.alt_text

        return ResizeChoice(
            target=self.target,
            alt_text=alt_text,
            title=self.title,
            mode=mode,
            percentage=self.percentage,
            width=self.width,
            height=self.height,
        )


def _optional_pixels(value: int) -> int | None:
    return value or None


class PromptDialog:
    """Asks for a resize choice on the terminal with click prompts."""

    def ask(self, context: ImageContext, default_mode: ResizeMode) -> ResizeChoice | None:
        original = context.original
        reference = context.reference
        click.echo(f"Image: {reference.raw_syntax}")
        click.echo(f"Original size: {original.width} x {original.height} px")

        try:
            target = SyntaxKind(
                click.prompt(
                    "Output syntax",
                    type=click.Choice([kind.value for kind in SyntaxKind]),
                    default=SyntaxKind.HTML.value,
                )
            )
            alt_text = click.prompt("Alt text", default=reference.alt_text, show_default=True)
            title = click.prompt("Title", default=reference.title, show_default=True)

            choice = ResizeChoice(target=target, alt_text=alt_text, title=title)
            if target is SyntaxKind.HTML:
                choice.mode = ResizeMode(
                    click.prompt(
                        "Resize by",
                        type=click.Choice([mode.value for mode in ResizeMode]),
                        default=default_mode.value,
                    )
                )
                if choice.mode is ResizeMode.PERCENTAGE:
                    choice.percentage = click.prompt(
                        "Percentage", type=click.FloatRange(min=1, max=1000), default=100.0
                    )
                else:
                    # 0 leaves a side to be derived from the aspect ratio
                    choice.width = _optional_pixels(
                        click.prompt("Width (px, 0 to derive)", type=click.IntRange(min=0), default=0)
                    )
                    choice.height = _optional_pixels(
                        click.prompt("Height (px, 0 to derive)", type=click.IntRange(min=0), default=0)
                    )

            if not click.confirm("Apply?", default=True):
                return None
        except click.Abort:
            return None

        return choice
