import json
import logging
import re

from django.conf import settings
from google import genai
from google.genai import errors, types

from blooddoc.exceptions import AnalysisParseError, UpstreamFailure

logger = logging.getLogger(__name__)

_client = None

CHAT_PROMPT = """You are a helpful chatbot for a blood donation and health management system. Your purpose is to provide general, basic health information and guide users to relevant sections of the application or professional help. You must not provide specific medical advice, diagnoses, or treatment plans. If a user asks for specific medical advice, instruct them to consult a healthcare professional. Provide concise and relevant answers.

Here are some examples of what you can do:
- Explain different blood types and their compatibility.
- Describe the process of blood donation.
- Provide general information about common health conditions (e.g., symptoms of anemia, benefits of a balanced diet).
- Guide users on how to use the SOS feature or find nearby hospitals.

User: {message}

Chatbot:"""

REPORT_PROMPT = """Analyze the following health report text and extract the key information in a JSON format. The JSON should contain:
- patientName (string): The name of the patient, or "Unknown" if not specified.
- summary (string): A concise summary of the report's main findings and overall health status.
- importantTopics (array of strings): A list of 3-5 important topics or main outcomes mentioned in the report.
- recommendations (array of strings): Any recommendations or next steps suggested in the report.
- urgency (string): 'critical', 'urgent', 'moderate', or 'low' based on the report's findings.
- bloodTestResults (object, optional): An object containing specific blood test results if available, e.g., {{ "bloodType": "O+", "hemoglobin": 12.5, "whiteBloodCells": 7000, "platelets": 200000 }}.

Health Report:
\"\"\"
{report_text}
\"\"\"

Ensure the output is a valid JSON object."""

FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n(.*?)\n?```", re.DOTALL)


def get_client():
    global _client
    if _client is None:
        _client = genai.Client(api_key=settings.GEMINI_API_KEY)
    return _client


def generate(prompt, temperature=0.7, max_output_tokens=1024):
    """One text completion from Gemini. SDK failures surface as UpstreamFailure."""
    try:
        response = get_client().models.generate_content(
            model=settings.GEMINI_MODEL,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_output_tokens,
            )
        )
    except (errors.APIError, ValueError) as e:
        logger.error("Gemini API Error: %s", e)
        raise UpstreamFailure("Server error during AI request.", details=str(e))

    text = response.text
    if not text:
        raise UpstreamFailure("Server error during AI request.", details="Empty response from model")
    return text.strip()


def chat(message):
    return generate(CHAT_PROMPT.format(message=message), max_output_tokens=500)


def parse_analysis(text):
    """
    Decode the model's JSON answer.

    The model sometimes wraps the object in a fenced code block, so the first
    fenced block wins when present.
    """
    match = FENCED_BLOCK.search(text)
    payload = match.group(1) if match else text
    try:
        analysis = json.loads(payload.strip())
    except json.JSONDecodeError as e:
        logger.error("Error parsing Gemini analysis JSON: %s", e)
        raise AnalysisParseError(details=str(e))
    if not isinstance(analysis, dict):
        raise AnalysisParseError(details="Expected a JSON object")
    return analysis


def analyze_report(report_text):
    text = generate(REPORT_PROMPT.format(report_text=report_text), temperature=0.2)
    logger.debug("Raw analysis text: %s", text)
    return parse_analysis(text)
