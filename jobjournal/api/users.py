# jobjournal/api/users.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from jobjournal.core.security import hash_password
from jobjournal.models.user import (
    JobCreate,
    JobOut,
    JobUpdate,
    SkillCreate,
    SkillOut,
    SkillUpdate,
    UserOut,
)
from jobjournal.repositories.users import JOBS, SKILLS, UserRepository, get_user_repository
from jobjournal.services.registration import username_taken_error, validate_credentials

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND = "Not Found"


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)


def check_ids_match(path_id: str, body_id: Optional[Any]) -> None:
    if not (path_id and body_id and path_id == body_id):
        message = (
            f"Bad Request: Request path id ({path_id}) and request body id ({body_id}) must match"
        )
        logger.warning(message)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---- users ------------------------------------------------------------------

@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    repo: UserRepository = Depends(get_user_repository),
):
    payload = payload or {}
    validate_credentials(payload)
    username, password = payload["username"], payload["password"]

    if await repo.username_taken(username):
        raise username_taken_error()
    user = await repo.create_user(username, hash_password(password))
    return UserOut.from_doc(user)


@router.get("", response_model=List[UserOut])
async def list_users(repo: UserRepository = Depends(get_user_repository)):
    users = await repo.list_users()
    return [UserOut.from_doc(u) for u in users]


@router.get("/user", response_model=List[UserOut])
async def find_users_by_username(
    username: str = Query(...),
    repo: UserRepository = Depends(get_user_repository),
):
    user = await repo.find_by_username(username)
    return [UserOut.from_doc(user)] if user else []


# ---- skills -------------------------------------------------------------------

@router.get("/skills/{user_id}", response_model=List[SkillOut])
async def list_skills(user_id: str, repo: UserRepository = Depends(get_user_repository)):
    skills = await repo.list_subdocuments(user_id, SKILLS)
    if skills is None:
        raise _not_found()
    return [SkillOut.from_doc(s) for s in skills]


@router.post("/new/skills/{user_id}", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def add_skill(user_id: str, payload: SkillCreate, repo: UserRepository = Depends(get_user_repository)):
    user = await repo.add_subdocument(user_id, SKILLS, payload.to_document())
    if not user:
        raise _not_found()
    return UserOut.from_doc(user)


@router.put("/edit/{user_id}/skills/{skill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def edit_skill(
    user_id: str,
    skill_id: str,
    payload: SkillUpdate,
    repo: UserRepository = Depends(get_user_repository),
):
    check_ids_match(skill_id, payload.id)
    user = await repo.update_subdocument(user_id, SKILLS, skill_id, payload.changes())
    if not user:
        raise _not_found()
    return _no_content()


@router.delete("/delete/{user_id}/skills/{skill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_skill(user_id: str, skill_id: str, repo: UserRepository = Depends(get_user_repository)):
    user = await repo.remove_subdocument(user_id, SKILLS, skill_id)
    if not user:
        raise _not_found()
    return _no_content()


# ---- jobs ---------------------------------------------------------------------

@router.get("/jobs/{user_id}", response_model=List[JobOut])
async def list_jobs(user_id: str, repo: UserRepository = Depends(get_user_repository)):
    jobs = await repo.list_subdocuments(user_id, JOBS)
    if jobs is None:
        raise _not_found()
    return [JobOut.from_doc(j) for j in jobs]


@router.post("/new/jobs/{user_id}", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def add_job(user_id: str, payload: JobCreate, repo: UserRepository = Depends(get_user_repository)):
    user = await repo.add_subdocument(user_id, JOBS, payload.to_document())
    if not user:
        raise _not_found()
    return UserOut.from_doc(user)


@router.put("/edit/{user_id}/jobs/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def edit_job(
    user_id: str,
    job_id: str,
    payload: JobUpdate,
    repo: UserRepository = Depends(get_user_repository),
):
    check_ids_match(job_id, payload.id)
    user = await repo.update_subdocument(user_id, JOBS, job_id, payload.changes())
    if not user:
        raise _not_found()
    return _no_content()


@router.delete("/delete/{user_id}/jobs/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(user_id: str, job_id: str, repo: UserRepository = Depends(get_user_repository)):
    user = await repo.remove_subdocument(user_id, JOBS, job_id)
    if not user:
        raise _not_found()
    return _no_content()


# ---- single sub-documents and users by id ---------------------------------------
# declared last so the fixed prefixes above win over the path parameters

@router.get("/{user_id}/skills/{skill_id}", response_model=SkillOut)
async def get_skill(user_id: str, skill_id: str, repo: UserRepository = Depends(get_user_repository)):
    skill = await repo.get_subdocument(user_id, SKILLS, skill_id)
    if skill is None:
        raise _not_found()
    return SkillOut.from_doc(skill)


@router.get("/{user_id}/jobs/{job_id}", response_model=JobOut)
async def get_job(user_id: str, job_id: str, repo: UserRepository = Depends(get_user_repository)):
    job = await repo.get_subdocument(user_id, JOBS, job_id)
    if job is None:
        raise _not_found()
    return JobOut.from_doc(job)


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: str, repo: UserRepository = Depends(get_user_repository)):
    user = await repo.find_by_id(user_id)
    if not user:
        raise _not_found()
    return UserOut.from_doc(user)


@router.put("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def edit_user(
    user_id: str,
    payload: Optional[Dict[str, Any]] = Body(default=None),
    repo: UserRepository = Depends(get_user_repository),
):
    payload = payload or {}
    check_ids_match(user_id, payload.get("id"))
    validate_credentials(payload, required=())

    user = await repo.find_by_id(user_id)
    if not user:
        raise _not_found()

    changes: Dict[str, Any] = {}
    if "username" in payload and payload["username"] != user["username"]:
        if await repo.username_taken(payload["username"], exclude_id=user["_id"]):
            raise username_taken_error()
        changes["username"] = payload["username"]
    if "password" in payload:
        changes["password"] = hash_password(payload["password"])

    if changes:
        user.update(changes)
        await repo.save(user)
    return _no_content()


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, repo: UserRepository = Depends(get_user_repository)):
    if not await repo.delete_user(user_id):
        raise _not_found()
    return _no_content()
