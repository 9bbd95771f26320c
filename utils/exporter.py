import docx
from typing import List, Optional
import io

from services.quiz_engine import ReviewItem
from utils.report import format_score

def generate_review_docx(title: str, review: List[ReviewItem], final_score: int,
                         bucket: Optional[str] = None) -> io.BytesIO:
    """Generates a .docx report of a reviewed session."""
    doc = docx.Document()
    doc.add_heading(title, 0)

    result = f"Score: {format_score(final_score)}"
    if bucket:
        result += f" ({bucket})"
    doc.add_paragraph(result)

    for item in review:
        para = doc.add_paragraph(style='List Number')
        if item.question is None:
            para.add_run(f"Question #{item.answer.question_index + 1} is no longer available").italic = True
            continue
        para.add_run(item.question.question).bold = True

        # Choices, the picked one marked with "+"
        picked = item.answer.choice_index
        for j, choice in enumerate(item.question.choices):
            prefix = "+" if j == picked else "="
            doc.add_paragraph(f"{prefix} {choice.text} [{choice.points}]")

        if picked is None:
            doc.add_paragraph("! Skipped", style='Caption')
        elif not 0 <= picked < len(item.question.choices):
            doc.add_paragraph(f"! Invalid choice {picked}", style='Caption')
        doc.add_paragraph(f"Points: {item.answer.score}")

    buffer = io.BytesIO()
    doc.save(buffer)
    buffer.seek(0)
    return buffer
