from __future__ import annotations

import dataclasses
import logging
from typing import Any

from fastapi import APIRouter
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse

import services
from calculator import BeatmapCalculator
from calculator import CalculatedBeatmap
from calculator import CalculatedScore
from calculator import ScoreCalculator
from errors import CalculationError
from errors import CollaboratorError
from errors import HashMismatch
from models.scores import BeatmapCalculationRequest
from models.scores import ScoreCalculationRequest
from models.scores import ScoreInfo
from models.scores import ScoreSimulationRequest
from simulator import ScoreSimulator

logger = logging.getLogger(__name__)

router = APIRouter()

ERROR_STATUS_CODES: dict[type[CalculationError], int] = {
    HashMismatch: status.HTTP_409_CONFLICT,
    CollaboratorError: status.HTTP_502_BAD_GATEWAY,
}


async def handle_calculation_error(
    request: Request,
    exc: CalculationError,
) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.warning("%s %s failed: %r", request.method, request.url.path, exc)

    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


def serialize_score(result: CalculatedScore) -> dict[str, Any]:
    response = {
        "score_info": result.score_info.model_dump(mode="json"),
        "difficulty": dataclasses.asdict(result.difficulty),
        "performance": dataclasses.asdict(result.performance),
        "statistics": result.statistics.model_dump(),
    }
    if result.life_bar is not None:
        response["life_bar"] = [frame.model_dump() for frame in result.life_bar]

    return response


def serialize_beatmap(result: CalculatedBeatmap) -> dict[str, Any]:
    beatmap_info = None
    if result.beatmap_info is not None:
        beatmap_info = result.beatmap_info.model_dump(mode="json")

    return {
        "beatmap_info": beatmap_info,
        "attributes": result.attributes.model_dump(mode="json"),
        "difficulty": dataclasses.asdict(result.difficulty),
        "performance": [dataclasses.asdict(attrs) for attrs in result.performance],
        "beatmap_md5": result.beatmap_md5,
    }


@router.post("/scores/simulate", response_model=ScoreInfo)
async def simulate_score(request: ScoreSimulationRequest) -> ScoreInfo:
    return ScoreSimulator().simulate(request)


@router.post("/scores/calculate")
async def calculate_score(request: ScoreCalculationRequest) -> dict[str, Any]:
    calculator = ScoreCalculator(services.toolkit)
    result = await calculator.calculate(request)

    return serialize_score(result)


@router.post("/beatmaps/calculate")
async def calculate_beatmap(request: BeatmapCalculationRequest) -> dict[str, Any]:
    calculator = BeatmapCalculator(services.toolkit)
    result = await calculator.calculate(request)

    return serialize_beatmap(result)
