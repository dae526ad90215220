from django.urls import path
from .views import (
    LemmaSetView,
    WordFlagsView,
    WordProgressDetailView,
    WordProgressListView,
    WordScreenshotView,
)

urlpatterns = [
    path("lemma-set", LemmaSetView.as_view(), name="lemma-set"),
    path("word-progress", WordProgressListView.as_view(), name="word-progress-list"),
    path("word-progress/flags", WordFlagsView.as_view(), name="word-progress-flags"),
    path("word-progress/screenshot", WordScreenshotView.as_view(), name="word-progress-screenshot"),
    path("word-progress/<str:word_key>", WordProgressDetailView.as_view(), name="word-progress-detail"),
]
