"""Building blocks for terminal slideshows: key bindings, commands, configuration, snippet execution, speaker notes, HTML text styling and number padding."""

__version__ = "0.1.0"