# shared/api_markers.py
"""
API 문서화용 마커 클래스들

@extend_schema 에서 요청 바디가 없는 엔드포인트를 표시할 때 사용합니다.
"""
from rest_framework import serializers


class EmptySerializer(serializers.Serializer):
    """
    본문이 없는 요청/응답에 쓰는 더미 시리얼라이저

    사용 예시:
    @extend_schema(request=EmptySerializer, responses={200: dict})
    def post(self, request):
        ...
    """
    pass
