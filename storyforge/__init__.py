"""StoryForge: narrative and content generation pipeline.

Turns knowledge facts about a business into a persona-aware page storyline
and populates page sections with traceable copy.
"""

__version__ = "0.1.0"
