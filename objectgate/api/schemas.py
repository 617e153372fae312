"""
Shared API schema base.

Route modules define their own request/response models on top of this.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase, the way clients expect them."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
