from rest_framework.response import Response
from rest_framework.views import APIView

from blooddoc.auth_utils import authenticate_request
from blooddoc.exceptions import ValidationError
from blooddoc.utils import request_body

from .gemini_service import analyze_report, chat


class ChatView(APIView):
    """
    POST /api/ai/chat
    Body: {"message": "What blood types can receive O-?"}
    """

    @authenticate_request
    def post(self, request):
        message = str(request_body(request).get('message') or '').strip()
        if not message:
            raise ValidationError("Message is required for chat.")
        return Response({"response": chat(message)})


class AnalyzeReportView(APIView):
    """
    POST /api/ai/analyze-report
    Body: {"reportText": "..."}
    """

    @authenticate_request
    def post(self, request):
        report_text = str(request_body(request).get('reportText') or '').strip()
        if not report_text:
            raise ValidationError("Report text is required for AI analysis.")
        return Response(analyze_report(report_text))
