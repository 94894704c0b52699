"""TubeScout - 채널 분석 및 영상 아이디어 스트리밍 서비스"""

__version__ = "1.0.0"
