"""Assessment generation services: prompting, parsing, assembly and rendering."""
