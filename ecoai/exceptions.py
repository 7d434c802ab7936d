"""Domain errors raised by the EcoAI engines and mapped to HTTP by the API."""


class EcoAIError(Exception):
    """Base class for all EcoAI domain errors."""


class NotFoundError(EcoAIError, LookupError):
    """A company, department, scenario or threshold id did not resolve."""

    def __init__(self, entity: str, entity_id) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class ScenarioSaveError(EcoAIError):
    """A simulation snapshot could not be serialized; nothing was persisted."""
