"""Transcript Builder - on-demand academic transcripts."""

from campusrecords.transcript.builder import TranscriptBuilder
from campusrecords.transcript.models import (
    Transcript,
    TranscriptEntry,
    TranscriptSummary,
    academic_standing,
)
from campusrecords.transcript.report import render_transcript

__all__ = [
    "Transcript",
    "TranscriptBuilder",
    "TranscriptEntry",
    "TranscriptSummary",
    "academic_standing",
    "render_transcript",
]
