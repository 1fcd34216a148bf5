"""Pipeline exception definitions.

Only configuration defects raise. Data-quality problems (missing facts,
synthesis failures, slot violations) are reported through result objects.
"""


class StoryForgeError(Exception):
    """Base exception for the generation pipeline."""

    pass


class ConfigurationError(StoryForgeError):
    """A static registry is missing an entry the caller relies on."""

    pass


class TemplateNotFoundError(ConfigurationError):
    """No narrative template is registered for a page type.

    Attributes:
        page_type: The page type that was requested.
    """

    def __init__(self, page_type: str) -> None:
        super().__init__(f"No narrative template registered for page type '{page_type}'")
        self.page_type = page_type


class SlotSchemaNotFoundError(ConfigurationError):
    """No slot schema is registered for a component variant.

    Attributes:
        component_id: The component id that was requested.
    """

    def __init__(self, component_id: str) -> None:
        super().__init__(f"No slot schema registered for component '{component_id}'")
        self.component_id = component_id
