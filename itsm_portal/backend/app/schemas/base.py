# itsm_portal/backend/app/schemas/base.py

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Response bodies: camelCase on the wire, built straight from ORM rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RequestModel(ApiModel):
    """Request bodies reject unknown fields."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# Ranges of the INTEGER and BIGINT columns ids and sizes land in
MAX_DB_ID = 2**31 - 1
MAX_FILE_SIZE = 2**63 - 1
