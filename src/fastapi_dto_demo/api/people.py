"""People endpoints: legacy schema nodes, validated by pipes and guards."""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from fastapi_dto import ValidationGuard, ValidationPipe, create_dto, dto_response
from fastapi_dto.legacy import array, enum, integer, lazy, obj, string

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/people", tags=["people"])

_people: list[dict[str, Any]] = []

person = lazy()
person.define(
    obj(
        name=string(min_length=1).describe("Full name"),
        email=string(format="email"),
        age=integer(minimum=0).optional(),
        role=enum("admin", "member").default("member"),
        children=array(person).default(list),
    ).named("Person")
)

PersonDto = create_dto(person, name="PersonDto")

PersonQueryDto = create_dto(obj(role=enum("admin", "member").optional()), name="PersonQueryDto")


@router.post("", status_code=201, response_model=None)
@dto_response(201, PersonDto, "Created person")
def create_person(payload: dict = Depends(ValidationPipe(PersonDto))) -> dict[str, Any]:
    _people.append(payload)
    logger.info("people.create name=%s", payload["name"])
    return payload


@router.get(
    "",
    response_model=None,
    dependencies=[Depends(ValidationGuard("query", PersonQueryDto))],
)
@dto_response(200, [PersonDto])
def list_people() -> list[dict[str, Any]]:
    return list(_people)
