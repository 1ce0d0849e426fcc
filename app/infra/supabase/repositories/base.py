"""Base repository with the CRUD operations the time-tracking tables need"""
from typing import Generic, TypeVar, Type, Optional, Dict, Any
from pydantic import BaseModel
from supabase import Client  # type: ignore

T = TypeVar('T', bound=BaseModel)
CreateT = TypeVar('CreateT', bound=BaseModel)
UpdateT = TypeVar('UpdateT', bound=BaseModel)


class BaseRepository(Generic[T, CreateT, UpdateT]):
    """
    Base repository over a single Supabase table.
    Rows are keyed by UUID strings; callers only ever see pydantic models.
    """

    def __init__(self, client: Client, table_name: str, model_class: Type[T]):
        self._client = client
        self._table_name = table_name
        self._model_class = model_class

    def _table(self):
        return self._client.table(self._table_name)

    def _to_model(self, data: Dict[str, Any]) -> T:
        """Convert database dict to domain model"""
        return self._model_class(**data)

    async def find_by_id(self, id: str) -> Optional[T]:
        """Find a single record by ID"""
        response = self._table().select("*").eq("id", id).execute()

        if not response.data:
            return None

        return self._to_model(response.data[0])

    async def create(self, data: CreateT) -> T:
        """Insert a record and return the stored row"""
        data_dict = data.model_dump(exclude_unset=True, mode='json')
        response = self._table().insert(data_dict).execute()

        if not response.data:
            raise ValueError(f"Insert into {self._table_name} returned no rows")

        return self._to_model(response.data[0])

    async def update(self, id: str, data: UpdateT) -> Optional[T]:
        """Update a record by ID; None when no row matched"""
        data_dict = data.model_dump(exclude_unset=True, mode='json')

        if not data_dict:
            return await self.find_by_id(id)

        response = self._table().update(data_dict).eq("id", id).execute()

        if not response.data:
            return None

        return self._to_model(response.data[0])
