from io import BytesIO
from docx import Document
import PyPDF2

from app.services.errors import UnsupportedFileType

PDF_TYPES = {'application/pdf'}
WORD_TYPES = {
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'application/msword',
}
TEXT_TYPES = {'text/plain'}

SUPPORTED_TYPES = PDF_TYPES | WORD_TYPES | TEXT_TYPES


class ResumeParser:
    """Extract plain text from uploaded PDF, DOCX/DOC or text resumes"""

    def extract_text(self, file_bytes: bytes, mime_type: str) -> str:
        mime_type = (mime_type or '').split(';')[0].strip().lower()

        if mime_type in PDF_TYPES:
            return self.parse_pdf(file_bytes)
        elif mime_type in WORD_TYPES:
            return self.parse_docx(file_bytes)
        elif mime_type in TEXT_TYPES:
            return file_bytes.decode('utf-8', errors='replace')
        else:
            raise UnsupportedFileType(mime_type or 'unknown')

    def parse_docx(self, file_bytes: bytes) -> str:
        """Paragraph text joined by newlines (tables included)"""
        doc = Document(BytesIO(file_bytes))

        lines = [para.text for para in doc.paragraphs if para.text.strip()]
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    lines.append(' | '.join(cells))
        return '\n'.join(lines)

    def parse_pdf(self, file_bytes: bytes) -> str:
        reader = PyPDF2.PdfReader(BytesIO(file_bytes))

        full_text = ''
        for page in reader.pages:
            full_text += (page.extract_text() or '') + '\n'
        return full_text.strip()


resume_parser = ResumeParser()
