"""
services/navigator.py

사이드바 문제 번호 네비게이터용 뷰 모델.
문제를 카테고리별로 묶는다 (처음 등장한 카테고리 순서 유지).
독립 상태 없음, 백엔드 호출 없음.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from pppk_exam.models.exam_model import ExamQuestion


@dataclass(frozen=True)
class NavigatorItem:
    index: int             # 전체 문제 리스트 내 인덱스 (0-based)
    exam_question_id: int
    answered: bool
    current: bool

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def status(self) -> str:
        if self.current:
            return "current"
        return "answered" if self.answered else "unanswered"


@dataclass
class NavigatorGroup:
    category: str
    items: List[NavigatorItem] = field(default_factory=list)

    @property
    def answered_count(self) -> int:
        return sum(1 for item in self.items if item.answered)


def build_navigator(
    questions: Sequence[ExamQuestion],
    answers: Dict[int, int],
    current_index: int,
) -> List[NavigatorGroup]:
    """
    카테고리별 문제 그룹을 만든다.

    Args:
        questions:     세션의 문제 리스트 (출제 순서)
        answers:       AnswerMap {exam_question_id: option_id}
        current_index: 현재 문제 인덱스

    Returns:
        NavigatorGroup 리스트. 카테고리는 처음 등장한 순서.
    """
    groups: Dict[str, NavigatorGroup] = {}
    for idx, q in enumerate(questions):
        group = groups.get(q.category)
        if group is None:
            group = groups[q.category] = NavigatorGroup(category=q.category)
        group.items.append(
            NavigatorItem(
                index=idx,
                exam_question_id=q.exam_question_id,
                answered=q.exam_question_id in answers,
                current=idx == current_index,
            )
        )
    return list(groups.values())
