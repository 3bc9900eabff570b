# jobjournal/models/user.py
"""Pydantic models for users and their embedded skills and jobs.

Stored documents are plain dicts keyed the way Mongo sees them (``_id``,
``dateApplied``); the ``*Out`` models are the API representations built
from those dicts and never carry the password hash.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


def oid_str(oid) -> Optional[str]:
    return str(oid) if oid is not None else None


def with_new_id(data: Dict[str, Any]) -> Dict[str, Any]:
    doc = {"_id": ObjectId()}
    doc.update(data)
    return doc


# ---- inputs -----------------------------------------------------------------

class SkillCreate(BaseModel):
    skill: str
    experience: Number

    def to_document(self) -> Dict[str, Any]:
        return with_new_id(self.model_dump())


class SkillUpdate(BaseModel):
    id: Optional[str] = None
    skill: Optional[str] = None
    experience: Optional[Number] = None

    def changes(self) -> Dict[str, Any]:
        # an explicit null never overwrites a stored value
        return self.model_dump(exclude_unset=True, exclude_none=True, exclude={"id"})


class RequiredSkillIn(BaseModel):
    skill: str
    experience: Number


class JobCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    location: str = Field(min_length=1)
    required: List[RequiredSkillIn] = Field(default_factory=list)
    date_applied: Optional[datetime] = Field(default=None, alias="dateApplied")
    progress: List[str] = Field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        doc = self.model_dump(by_alias=True)
        doc["required"] = [with_new_id(r) for r in doc["required"]]
        return with_new_id(doc)


class JobUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1)
    company: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    required: Optional[List[RequiredSkillIn]] = None
    date_applied: Optional[datetime] = Field(default=None, alias="dateApplied")
    progress: Optional[List[str]] = None

    def changes(self) -> Dict[str, Any]:
        changes = self.model_dump(exclude_unset=True, exclude={"id"}, by_alias=True)
        # title/company/location stay required once stored
        for key in ("title", "company", "location"):
            if key in changes and changes[key] is None:
                del changes[key]
        if changes.get("required") is not None:
            changes["required"] = [with_new_id(r) for r in changes["required"]]
        return changes


# ---- API representations ------------------------------------------------------

class SkillOut(BaseModel):
    id: str
    skill: Optional[str] = None
    experience: Optional[Number] = None

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "SkillOut":
        return cls(id=oid_str(doc.get("_id")), skill=doc.get("skill"), experience=doc.get("experience"))


class JobOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    company: str
    location: str
    required: List[SkillOut] = Field(default_factory=list)
    date_applied: Optional[datetime] = Field(default=None, alias="dateApplied")
    progress: List[str] = Field(default_factory=list)

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "JobOut":
        return cls(
            id=oid_str(doc.get("_id")),
            title=doc.get("title"),
            company=doc.get("company"),
            location=doc.get("location"),
            required=[SkillOut.from_doc(r) for r in doc.get("required") or []],
            date_applied=doc.get("dateApplied"),
            progress=doc.get("progress") or [],
        )


class UserOut(BaseModel):
    id: str
    username: str
    skills: List[SkillOut] = Field(default_factory=list)
    jobs: List[JobOut] = Field(default_factory=list)

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "UserOut":
        return cls(
            id=oid_str(doc.get("_id")),
            username=doc.get("username", ""),
            skills=[SkillOut.from_doc(s) for s in doc.get("skills") or []],
            jobs=[JobOut.from_doc(j) for j in doc.get("jobs") or []],
        )


class TokenOut(BaseModel):
    authToken: str
