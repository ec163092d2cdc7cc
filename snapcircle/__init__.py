"""SnapCircle — 친구 관계 상태 머신과 사진 공개 범위 판정 백엔드."""
