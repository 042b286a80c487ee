"""Long-form HTML bodies, one renderer per document type.

Renderers only interpolate what ``analyze`` found; anything missing is left
as a bracketed placeholder such as ``[Date]`` for the author to fill in.
"""

from enum import Enum
from html import escape
from typing import Callable

from docflow.services.synthesizer.analyzer import PromptAnalysis


class DocumentType(str, Enum):
    NOTICE = "notice"
    HOLIDAY = "holiday"
    MEETING = "meeting"
    EXAM = "exam"
    EVENT = "event"
    LETTER = "letter"
    MEMO = "memo"
    POLICY = "policy"
    APPLICATION = "application"
    CERTIFICATE = "certificate"

    @classmethod
    def parse(cls, value: str) -> "DocumentType":
        try:
            return cls(value)
        except ValueError:
            return cls.NOTICE


TITLES: dict[DocumentType, str] = {
    DocumentType.NOTICE: "NOTICE",
    DocumentType.HOLIDAY: "HOLIDAY NOTICE",
    DocumentType.MEETING: "MEETING NOTICE",
    DocumentType.EXAM: "EXAMINATION NOTICE",
    DocumentType.EVENT: "EVENT ANNOUNCEMENT",
    DocumentType.LETTER: "LETTER",
    DocumentType.MEMO: "MEMORANDUM",
    DocumentType.POLICY: "POLICY DOCUMENT",
    DocumentType.APPLICATION: "APPLICATION",
    DocumentType.CERTIFICATE: "CERTIFICATE",
}


def field(value: str, placeholder: str) -> str:
    """Escaped value, or the bracketed placeholder when nothing was extracted."""
    return escape(value) if value else f"[{placeholder}]"


def _details_list(analysis: PromptAnalysis) -> str:
    if not analysis.specific_details:
        return "<li>[Additional Details]</li>"
    return "\n".join(f"<li>{escape(detail)}</li>" for detail in analysis.specific_details)


def _first_date(analysis: PromptAnalysis) -> str:
    return analysis.dates[0] if analysis.dates else ""


def _holiday_paragraph(analysis: PromptAnalysis) -> str:
    keywords = analysis.keywords
    if "diwali" in keywords:
        return (
            "<p>On the auspicious occasion of <strong>Diwali</strong>, the Festival of "
            "Lights, the institution will remain closed. Diwali celebrates the victory of "
            "light over darkness and good over evil, and is a time for families to come "
            "together, light lamps and share sweets. We encourage everyone to celebrate "
            "safely and to be mindful of the environment while using fireworks.</p>"
        )
    if "christmas" in keywords:
        return (
            "<p>On the occasion of <strong>Christmas</strong>, the institution will remain "
            "closed. Christmas is a season of joy, generosity and goodwill, and we hope the "
            "break gives everyone time to rest and spend with family and friends.</p>"
        )
    if "eid" in keywords:
        return (
            "<p>On the occasion of <strong>Eid</strong>, the institution will remain closed. "
            "Eid is a celebration of faith, gratitude and community, and we extend our "
            "warmest wishes to all who observe it.</p>"
        )
    return (
        "<p>The institution will remain closed for the holiday mentioned above. Regular "
        "classes and office work will resume on the next working day as per the academic "
        "calendar.</p>"
    )


def render_holiday(analysis: PromptAnalysis) -> str:
    date = field(_first_date(analysis), "Date")
    return f"""
<p>This is to inform {field(analysis.recipient, "Recipients")} that the institution will remain closed on <strong>{date}</strong>.</p>
{_holiday_paragraph(analysis)}
<p><strong>Important points to note:</strong></p>
<ul>
<li>All academic and administrative activities will remain suspended on {date}.</li>
<li>Hostel residents should follow the instructions issued by the hostel warden.</li>
<li>Emergency services and security will function as usual.</li>
<li>Any examinations or assignments scheduled for this day will be rescheduled, and revised dates will be communicated separately.</li>
</ul>
<p><strong>Details:</strong></p>
<ul>
{_details_list(analysis)}
</ul>
<p>Regular classes will resume on <strong>[Resumption Date]</strong>. For any queries, please contact the administrative office at [Contact Details].</p>
<p>Wishing everyone a joyful and safe holiday.</p>
"""


def render_meeting(analysis: PromptAnalysis) -> str:
    return f"""
<p>This is to inform {field(analysis.recipient, "Recipients")} that a meeting has been scheduled as per the details below.</p>
<ul>
<li><strong>Date:</strong> {field(_first_date(analysis), "Date")}</li>
<li><strong>Time:</strong> {field(analysis.time, "Time")}</li>
<li><strong>Venue:</strong> {field(analysis.location, "Venue")}</li>
<li><strong>Agenda:</strong> {field(analysis.purpose, "Agenda")}</li>
</ul>
<p><strong>Points for discussion:</strong></p>
<ul>
{_details_list(analysis)}
<li>Any other matter with the permission of the chair.</li>
</ul>
<p>All members are requested to be present on time and to bring the relevant documents and reports. Members who are unable to attend are requested to inform the office in advance.</p>
<p>Minutes of the meeting will be circulated to all members after the meeting.</p>
"""


def render_exam(analysis: PromptAnalysis) -> str:
    return f"""
<p>This is to inform {field(analysis.recipient, "Recipients")} that the examinations will be conducted as per the schedule below.</p>
<ul>
<li><strong>Commencement Date:</strong> {field(_first_date(analysis), "Date")}</li>
<li><strong>Reporting Time:</strong> {field(analysis.time, "Time")}</li>
<li><strong>Venue:</strong> {field(analysis.location, "Examination Hall")}</li>
<li><strong>Subject / Course:</strong> {field(analysis.purpose, "Subject")}</li>
</ul>
<p><strong>Instructions for candidates:</strong></p>
<ul>
<li>Candidates must carry their hall ticket and college identity card to every examination.</li>
<li>Candidates should report to the examination hall at least 15 minutes before the start time.</li>
<li>Mobile phones, smart watches and other electronic devices are strictly prohibited.</li>
<li>Any form of malpractice will lead to disciplinary action as per the examination rules.</li>
</ul>
<p><strong>Additional information:</strong></p>
<ul>
{_details_list(analysis)}
</ul>
<p>The detailed timetable is available on the notice board and the college website. For queries, contact the Examination Department at [Contact Details].</p>
"""


def render_event(analysis: PromptAnalysis) -> str:
    return f"""
<p>We are pleased to announce an event for {field(analysis.recipient, "Participants")}.</p>
<ul>
<li><strong>Date:</strong> {field(_first_date(analysis), "Date")}</li>
<li><strong>Time:</strong> {field(analysis.time, "Time")}</li>
<li><strong>Venue:</strong> {field(analysis.location, "Venue")}</li>
<li><strong>Theme:</strong> {field(analysis.purpose, "Event Theme")}</li>
</ul>
<p><strong>Event highlights:</strong></p>
<ul>
{_details_list(analysis)}
</ul>
<p>Participants are requested to register before <strong>[Registration Deadline]</strong> with the event coordinators. Certificates of participation will be issued to all registered participants.</p>
<p>We look forward to your enthusiastic participation in making this event a grand success.</p>
"""


def render_letter(analysis: PromptAnalysis) -> str:
    addressee = analysis.recipient or (analysis.names[0] if analysis.names else "")
    return f"""
<p>Dear {field(addressee, "Recipient Name")},</p>
<p>I am writing to you regarding {field(analysis.purpose, "Subject of the Letter")}.</p>
<ul>
{_details_list(analysis)}
</ul>
<p>I would be grateful if you could give this matter your kind consideration at the earliest. Please feel free to contact me at [Contact Details] should you require any further information.</p>
<p>Thank you for your time and attention.</p>
"""


def render_memo(analysis: PromptAnalysis) -> str:
    return f"""
<p>This memorandum is issued to {field(analysis.recipient, "Recipients")} concerning {field(analysis.purpose, "Subject")}.</p>
<p><strong>Key points:</strong></p>
<ul>
{_details_list(analysis)}
</ul>
<p>All concerned are requested to take note and act accordingly by <strong>{field(_first_date(analysis), "Deadline")}</strong>. This memo is for internal circulation only.</p>
"""


def render_policy(analysis: PromptAnalysis) -> str:
    return f"""
<p><strong>1. Purpose</strong></p>
<p>This policy sets out the rules and guidelines regarding {field(analysis.purpose, "Policy Subject")}.</p>
<p><strong>2. Scope</strong></p>
<p>This policy applies to {field(analysis.recipient, "All Students and Staff")} with effect from {field(_first_date(analysis), "Effective Date")}.</p>
<p><strong>3. Policy statements</strong></p>
<ul>
{_details_list(analysis)}
</ul>
<p><strong>4. Responsibilities</strong></p>
<p>Heads of departments are responsible for communicating this policy to their teams and ensuring compliance. Individuals are responsible for reading and following it.</p>
<p><strong>5. Non-compliance</strong></p>
<p>Violations of this policy may result in disciplinary action in accordance with the institution's rules.</p>
<p><strong>6. Review</strong></p>
<p>This policy will be reviewed annually or earlier if required. Queries may be directed to [Policy Owner].</p>
"""


def render_application(analysis: PromptAnalysis) -> str:
    return f"""
<p>Respected {field(analysis.recipient, "Sir/Madam")},</p>
<p>I, {field(analysis.names[0] if analysis.names else "", "Applicant Name")}, respectfully submit this application regarding {field(analysis.purpose, "Purpose of Application")}.</p>
<ul>
{_details_list(analysis)}
</ul>
<p>The relevant period / date is {field(_first_date(analysis), "Date")}. I have enclosed the supporting documents for your reference.</p>
<p>I kindly request you to consider my application favourably. I shall be grateful for your support.</p>
"""


def render_certificate(analysis: PromptAnalysis) -> str:
    return f"""
<p style="text-align:center">This is to certify that</p>
<p style="text-align:center"><strong>{field(analysis.names[0] if analysis.names else "", "Recipient Name")}</strong></p>
<p style="text-align:center">has successfully completed {field(analysis.purpose, "Course / Achievement")} on {field(_first_date(analysis), "Date")}.</p>
<ul>
{_details_list(analysis)}
</ul>
<p style="text-align:center">We wish them every success in their future endeavours.</p>
"""


def render_notice(analysis: PromptAnalysis) -> str:
    return f"""
<p>This is to inform {field(analysis.recipient, "Recipients")} about {field(analysis.purpose, "Subject")}.</p>
<ul>
<li><strong>Date:</strong> {field(_first_date(analysis), "Date")}</li>
<li><strong>Time:</strong> {field(analysis.time, "Time")}</li>
<li><strong>Venue:</strong> {field(analysis.location, "Venue")}</li>
</ul>
<p><strong>Details:</strong></p>
<ul>
{_details_list(analysis)}
</ul>
<p>All concerned are requested to take note of the above and act accordingly. For further information, please contact [Contact Details].</p>
"""


RENDERERS: dict[DocumentType, Callable[[PromptAnalysis], str]] = {
    DocumentType.NOTICE: render_notice,
    DocumentType.HOLIDAY: render_holiday,
    DocumentType.MEETING: render_meeting,
    DocumentType.EXAM: render_exam,
    DocumentType.EVENT: render_event,
    DocumentType.LETTER: render_letter,
    DocumentType.MEMO: render_memo,
    DocumentType.POLICY: render_policy,
    DocumentType.APPLICATION: render_application,
    DocumentType.CERTIFICATE: render_certificate,
}


def render_body(doc_type: DocumentType, analysis: PromptAnalysis) -> str:
    return RENDERERS.get(doc_type, render_notice)(analysis)
