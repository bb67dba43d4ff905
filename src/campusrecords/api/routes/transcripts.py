"""Transcript endpoints."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from campusrecords.api.dependencies import RecordsDep
from campusrecords.api.models import APIResponse, TranscriptResponse, transcript_to_response

router = APIRouter(prefix="/students/{student_id}/transcript", tags=["transcripts"])


@router.get("", response_model=APIResponse[TranscriptResponse])
def get_transcript(student_id: str, records: RecordsDep) -> APIResponse[TranscriptResponse]:
    """Build a student's transcript."""
    transcript = records.transcripts.generate(student_id)
    return APIResponse(data=transcript_to_response(transcript))


@router.get("/text", response_class=PlainTextResponse)
def get_transcript_text(student_id: str, records: RecordsDep) -> str:
    """Render a student's transcript as a plain-text report."""
    return records.transcripts.render(student_id)
