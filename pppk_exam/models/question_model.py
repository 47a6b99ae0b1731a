from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class BankOption(BaseModel):
    """
    문제 은행의 보기.
    점수는 문제 관리 화면에서만 (보기 단위로) 수정된다.
    """
    id: int = Field(
        ...,
        description="보기 ID"
    )
    option_text: str = Field(
        ...,
        description="보기 내용"
    )
    score: int = Field(
        0,
        ge=0,
        description="보기 선택 시 부여되는 점수 (음이 아닌 정수)"
    )


class BankQuestion(BaseModel):
    """
    문제 은행의 문제 모델
    """
    id: int = Field(
        ...,
        description="문제 ID"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="카테고리 (TEKNIS, MANAJERIAL, SOSIAL KULTURAL, WAWANCARA)"
    )
    question_text: str = Field(
        ...,
        description="문제 본문"
    )
    options: List[BankOption] = Field(
        default_factory=list,
        description="보기 리스트"
    )

    @field_validator('options', mode='before')
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    def option(self, option_id: int) -> Optional[BankOption]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None

    def with_option_score(self, option_id: int, score: int) -> 'BankQuestion':
        """
        지정한 보기의 점수만 바뀐 사본을 반환한다 (원본 불변).
        """
        options = [
            opt.model_copy(update={"score": score}) if opt.id == option_id else opt
            for opt in self.options
        ]
        return self.model_copy(update={"options": options})


class Pagination(BaseModel):
    """서버가 계산한 페이지 메타데이터."""
    current_page: int = 1
    items_per_page: int = 0
    total_items: int = 0
    total_pages: int = 0


class QuestionPage(BaseModel):
    questions: List[BankQuestion] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    @field_validator('questions', mode='before')
    @classmethod
    def none_as_empty(cls, v):
        return v or []
