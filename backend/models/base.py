# FILE: backend/models/base.py
"""
Shared model base: snake_case in Python, camelCase on the wire and in the store
"""
from typing import Any, Dict
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model serialized with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        """JSON-ready dict as persisted in the ephemeral store"""
        return self.model_dump(by_alias=True, mode="json")
