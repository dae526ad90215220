# progress/views.py
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .exceptions import InvalidIdentity, ProgressError, ValidationFailure
from .models import IdentityKey
from .serializers import ProgressRecordSerializer, ScreenshotSerializer
from .services import get_lemma_set, get_word_progress

LOGGER = logging.getLogger(__name__)


def _entry(record):
    return ProgressRecordSerializer(record).data if record is not None else None


def _server_error(tag: str, err: Exception) -> Response:
    LOGGER.exception("[%s] Error", tag)
    return Response({'detail': str(err)}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class LemmaSetView(APIView):
    """
    GET  /api/lemma-set  -> full list of known lemma strings.
    POST /api/lemma-set  {words: [str]} -> replaces the whole set.
    """
    def get(self, request):
        return Response(get_lemma_set().words(), status=status.HTTP_200_OK)

    def post(self, request):
        body = request.data if isinstance(request.data, dict) else {}
        words = body.get('words')
        if not isinstance(words, list):
            return Response({'detail': 'Expected { words: string[] }'}, status=400)

        try:
            count = get_lemma_set().replace_all(words)
        except ValidationFailure as e:
            return Response({'detail': str(e)}, status=400)
        except ProgressError as e:
            return _server_error('lemma-set', e)

        return Response({'ok': True, 'count': count}, status=status.HTTP_200_OK)


class WordProgressListView(APIView):
    """GET /api/word-progress -> {words: [Record...]}."""
    def get(self, request):
        records = get_word_progress().entries()
        return Response({'words': ProgressRecordSerializer(records, many=True).data})


class WordProgressDetailView(APIView):
    """GET /api/word-progress/{wordKey} -> {entry: Record}, 404 when not tracked."""
    def get(self, request, word_key: str):
        try:
            identity = IdentityKey.parse(word_key)
        except InvalidIdentity as e:
            return Response({'detail': str(e)}, status=400)

        record = get_word_progress().get(identity)
        if record is None:
            return Response({'detail': f'No progress for {identity}.'}, status=404)
        return Response({'entry': _entry(record)})


class WordFlagsView(APIView):
    """
    POST /api/word-progress/flags
    Body: {wordKey: "2:255:3", updates: {known?, bookmarked?}}
    Returns the merged entry, or null once both flags are cleared.
    """
    def post(self, request):
        body = request.data if isinstance(request.data, dict) else {}
        word_key = body.get('wordKey')
        updates = body.get('updates')

        if not word_key or not isinstance(updates, dict):
            return Response({'detail': 'Missing wordKey or updates'}, status=400)

        try:
            identity = IdentityKey.parse(word_key)
            record = get_word_progress().upsert_flags(identity, updates)
        except ValidationFailure as e:
            return Response({'detail': str(e)}, status=400)
        except ProgressError as e:
            return _server_error('word-progress/flags', e)

        return Response({'ok': True, 'entry': _entry(record)}, status=status.HTTP_200_OK)


class WordScreenshotView(APIView):
    """
    POST /api/word-progress/screenshot
    Body: {arabic, translation, root?, surah, ayah, startWordIndex, endWordIndex}
    Counts one screenshot of the word range and returns its entry.
    """
    def post(self, request):
        s = ScreenshotSerializer(data=request.data)
        if not s.is_valid():
            return Response({'detail': 'Invalid screenshot payload.', 'errors': s.errors}, status=400)
        v = s.validated_data

        try:
            identity = IdentityKey(v['surah'], v['ayah'], v['startWordIndex'], v['endWordIndex'])
            record = get_word_progress().record_screenshot(
                identity, v['arabic'], v['translation'], root=v.get('root'),
            )
        except ValidationFailure as e:
            return Response({'detail': str(e)}, status=400)
        except ProgressError as e:
            return _server_error('word-progress/screenshot', e)

        return Response({'ok': True, 'entry': _entry(record)}, status=status.HTTP_200_OK)
