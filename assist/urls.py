from django.urls import path

from . import views

urlpatterns = [
    path('ai/chat', views.ChatView.as_view(), name='ai-chat'),
    path('ai/analyze-report', views.AnalyzeReportView.as_view(), name='ai-analyze-report'),
]
