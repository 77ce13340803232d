from fastapi import APIRouter, Depends, HTTPException

from schedule_backend.deps import get_assembler, get_layout
from schedule_backend.schemas.schedule import GenerateIn, ValidateGroupsIn
from schedule_backend.utils.schedule_assembler import ScheduleAssembler
from schedule_backend.utils.timeslots import TimetableLayout

import logging
logger = logging.getLogger("schedule_backend.schedule")


router = APIRouter(prefix="/schedule", tags=["Schedule"])


@router.post("/generate-personalized")
def generate_personalized(body: GenerateIn, assembler: ScheduleAssembler = Depends(get_assembler)):
    logger.info(
        "Generating personalized schedule: %d requested, %d course groups available",
        len(body.user_request.desired_courses), len(body.course_groups),
    )
    result = assembler.assemble(body.course_groups, body.user_request)

    # conflicts never block; only an unknown course/group is a 400
    if not result.success:
        raise HTTPException(
            status_code=400,
            detail={"message": result.error, "validation_errors": result.validation_errors},
        )

    schedule = result.schedule
    logger.info(
        "Schedule ready: %d courses, %d spans, %d conflicts",
        schedule.generation_metadata.total_courses,
        schedule.generation_metadata.total_spans,
        schedule.conflict_validation.total_conflicts,
    )
    return {"success": True, "data": schedule.model_dump()}


@router.post("/validate-groups")
def validate_groups(body: ValidateGroupsIn, assembler: ScheduleAssembler = Depends(get_assembler)):
    result = assembler.validate_course_groups(body.course_groups)
    logger.info("Validated %d course groups, valid=%s", len(body.course_groups), result.valid)
    return {"success": True, "data": result.model_dump()}


@router.get("/time-slots")
def time_slots(layout: TimetableLayout = Depends(get_layout)):
    return {
        "success": True,
        "data": {
            "days": list(layout.days),
            "slots": [
                {"id": s.index, "start": s.start, "end": s.end, "label": s.label, "excel_col": s.excel_col}
                for s in layout.time_slots
            ],
            "total_slots_per_day": layout.slot_count,
            "total_days": len(layout.days),
        },
    }
