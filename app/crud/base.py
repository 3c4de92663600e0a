from typing import TypeVar, Generic, Type, Any, Optional, List, Dict
from sqlalchemy.orm import Session
from pydantic import BaseModel
from app.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchema = TypeVar("CreateSchema", bound=BaseModel)
UpdateSchema = TypeVar("UpdateSchema", bound=BaseModel)

class CRUDBase(Generic[ModelType, CreateSchema, UpdateSchema]):
    """Query helpers only: callers own the transaction (no commit in here)."""

    def __init__(self, model: Type[ModelType]): self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.get(self.model, id)

    def get_multi(self, db: Session, skip=0, limit=100) -> List[ModelType]:
        return db.query(self.model).order_by(self.model.id).offset(skip).limit(limit).all()

    def build(self, obj_in: CreateSchema | Dict[str, Any], extra: Dict[str, Any] | None=None) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        data = dict(data)
        if extra: data.update(extra)
        return self.model(**data)

    def apply(self, db_obj: ModelType, obj_in: UpdateSchema | Dict[str, Any]) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for f,v in data.items(): setattr(db_obj, f, v)
        return db_obj
