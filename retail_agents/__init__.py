"""ADK agents and supporting tools for retail sales plan tracking."""
