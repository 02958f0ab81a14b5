from typing import Dict, FrozenSet, Tuple

# Spreadsheet column labels, keyed by Schedule field
COLUMN_LABELS: Dict[str, Dict[str, str]] = {
    "ko": {
        "date": "날짜",
        "start_time": "시작시간",
        "end_time": "종료시간",
        "title": "제목",
    },
    "en": {
        "date": "date",
        "start_time": "startTime",
        "end_time": "endTime",
        "title": "title",
    },
}

# Lookup order when reading a row: localized label first, English key as fallback
IMPORT_KEYS: Dict[str, Tuple[str, ...]] = {
    field: (COLUMN_LABELS["ko"][field], COLUMN_LABELS["en"][field])
    for field in ("date", "start_time", "end_time", "title")
}

DEFAULT_SHEET_NAME = "월간일정"
EXPORT_FILENAME_SUFFIX = "_일정관리.xlsx"

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "10:00"
DEFAULT_TITLE = "새 일정"

# Korean public holidays, 2026
HOLIDAY_LABELS_2026: Dict[str, str] = {
    "2026-01-01": "신정",
    "2026-02-17": "설날",
    "2026-03-01": "삼일절",
    "2026-05-05": "어린이날",
    "2026-05-24": "석가탄신일",
    "2026-06-06": "현충일",
    "2026-08-15": "광복절",
    "2026-09-25": "추석",
    "2026-10-03": "개천절",
    "2026-10-09": "한글날",
    "2026-12-25": "성탄절",
}

# Days off in 2026, including the eves and substitute holidays that carry no label
REST_DAYS_2026: FrozenSet[str] = frozenset({
    "2026-01-01", "2026-02-16", "2026-02-17", "2026-02-18", "2026-03-01",
    "2026-03-02", "2026-05-05", "2026-05-24", "2026-05-25", "2026-06-06",
    "2026-08-15", "2026-08-17", "2026-09-24", "2026-09-25", "2026-09-26",
    "2026-10-03", "2026-10-05", "2026-10-09", "2026-12-25",
})
