from __future__ import annotations

from datetime import timedelta


# 신규 가입자의 신용 점수
INITIAL_CREDIT_SCORE = 100

# 이 점수 미만이면 글/댓글 작성이 제한된다.
CREDIT_THRESHOLD = 80

CREDIT_SCORE_FLOOR = 0

BAN_DURATION = timedelta(hours=24)

# 정지 기간이 끝난 유저에게 부여하는 점수 (이전 점수를 복원하지 않는다)
REHABILITATED_CREDIT_SCORE = 80

WEEKLY_RESET_CREDIT_SCORE = 100

# 관리자 수동 복구 시 점수
ADMIN_RESTORED_CREDIT_SCORE = 90

POST_VIOLATION_POINTS = 5
COMMENT_VIOLATION_POINTS = 1

# 주간 리셋 창: 포럼 타임존 기준 월요일 00:00 부터 1시간
WEEKLY_RESET_WEEKDAY = 0
WEEKLY_RESET_WINDOW_HOURS = 1
WEEKLY_RESET_JOB_NAME = "weekly_credit_reset"

DEFAULT_VIOLATION_REASON = "커뮤니티 규칙 위반"
