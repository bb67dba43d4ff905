"""Plain-text rendering of a transcript."""

from __future__ import annotations

from campusrecords.transcript.models import Transcript

WIDTH = 60
RULE = 40
TITLE_WIDTH = 25
ROW_FORMAT = "{:<10} {:<25} {:>7} {:>5} {:>6}"


def render_transcript(transcript: Transcript) -> str:
    """Render a transcript as an official-looking text report."""
    lines = [
        "OFFICIAL TRANSCRIPT",
        "=" * WIDTH,
        f"Student: {transcript.full_name} (ID: {transcript.student_id})",
        f"Registration No: {transcript.reg_no}",
        f"Email: {transcript.email}",
        f"Status: {transcript.status.name}",
        f"Generated: {transcript.generated_at:%Y-%m-%d %H:%M}",
        "=" * WIDTH,
        "",
    ]

    for semester, entries in transcript.by_semester():
        heading = semester.display_name.upper() if semester is not None else "UNSCHEDULED"
        lines.append(f"{heading} SEMESTER")
        lines.append("-" * RULE)
        lines.append(ROW_FORMAT.format("Code", "Title", "Credits", "Grade", "Points"))
        lines.append("-" * RULE)
        for entry in entries:
            lines.append(
                ROW_FORMAT.format(
                    entry.course_code,
                    entry.title[:TITLE_WIDTH],
                    entry.credits,
                    entry.letter_grade.value,
                    f"{entry.grade_points:.2f}",
                )
            )
        lines.append("")

    summary = transcript.summary
    lines.append("SUMMARY")
    lines.append("-" * RULE)
    lines.append(f"Total Credits Attempted: {summary.credits_attempted}")
    lines.append(f"Total Credits Earned: {summary.credits_earned}")
    lines.append(f"Total Quality Points: {summary.quality_points:.2f}")
    lines.append(f"Cumulative GPA: {summary.gpa:.2f}")
    lines.append(f"Academic Standing: {summary.standing}")

    awarded = [(letter, count) for letter, count in summary.distribution.items() if count]
    if awarded:
        lines.append("")
        lines.append("Grade Distribution:")
        for letter, count in awarded:
            lines.append(f"  {letter.value}: {count} course{'s' if count != 1 else ''}")

    return "\n".join(lines) + "\n"
