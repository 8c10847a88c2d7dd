from typing import Annotated

from pydantic import Field

# Largest value a sqlite INTEGER PRIMARY KEY can hold
MAX_ROW_ID = 2**63 - 1

RowId = Annotated[int, Field(ge=1, le=MAX_ROW_ID)]
