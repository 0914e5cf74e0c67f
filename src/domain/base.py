"""Base Domain Model

Shared SQLModel base for all persisted entities.
"""

from sqlmodel import SQLModel


class BaseModel(SQLModel):
    """Common base class for domain entities"""

    pass
