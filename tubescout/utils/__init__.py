"""유틸리티 패키지."""
