from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class RequestModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid",
    )


def drop_integral_fraction(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


__all__ = ["CamelModel", "RequestModel", "drop_integral_fraction"]
