from enum import Enum


class LessonStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    PENDING = "PENDING"
    DECLINED = "DECLINED"
