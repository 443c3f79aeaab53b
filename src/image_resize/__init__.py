"""image-resize: resize Markdown and HTML image embeds at a cursor."""
