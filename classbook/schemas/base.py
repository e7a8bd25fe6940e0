from datetime import time
from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python; either is accepted on input."""

    model_config = ConfigDict(
        alias_generator=AliasGenerator(
            validation_alias=lambda name: AliasChoices(to_camel(name), name),
            serialization_alias=to_camel,
        ),
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self, **kwargs):
        return self.model_dump(by_alias=True, mode="json", **kwargs)


def format_clock(value: time) -> str:
    return value.strftime("%H:%M")


def truncate_clock(value: time) -> time:
    return value.replace(second=0, microsecond=0, tzinfo=None)
