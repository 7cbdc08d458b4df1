"""Prompt text attached to every image turn."""

from __future__ import annotations

# Sent verbatim as the first content part of every user turn. The output
# format and language directives are for the model, not for this server.
INSTRUCTION_TEXT = (
	"look for recyclable items in the image provided. if any item is recyclable then first give a writeup "
	"about how it can be recycled but stick to methods that can be done at home or its easy. also include "
	"ways in which it can be reused if you find the object to be in good condition but again stick to scopes "
	"that can be useful around the household or easily accessible places, you can also include ways in which "
	"it can be used as items for handicrafts, or similar things that high school children find interesting; "
	"give ideas. also if there are multiple objects then you can list their recycle uses one after another. "
	"after that just print a json in a specific format like object: plastic; recycle: true, object: aluminium; "
	"recycle: true and so on. if the image is out of context just say 'out of context'. dont give me replies "
	"that like a markdown, instead keep it to plain text. pls give me the reply in ARABIC."
)
