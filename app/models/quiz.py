from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuizQuestion(BaseModel):
    """A multiple choice question; correct_answer indexes into options."""

    question: str
    options: list[str] = Field(..., min_length=2)
    correct_answer: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_correct_answer_in_range(self):
        if self.correct_answer >= len(self.options):
            raise ValueError("correct_answer must index one of the options")
        return self


class PublicQuizQuestion(BaseModel):
    question: str
    options: list[str]


class Quiz(BaseModel):
    id: str
    lesson_id: str
    title: str
    questions: list[QuizQuestion] = Field(default_factory=list)
    passing_score: int = Field(default=70, ge=0, le=100)
    created_at: datetime = Field(default_factory=datetime.today)


class PublicQuiz(BaseModel):
    """Quiz as shown to students: correct answers stripped."""

    id: str
    lesson_id: str
    title: str
    questions: list[PublicQuizQuestion]
    passing_score: int


class QuizAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_index: int = Field(..., alias="questionIndex")
    selected_answer: int = Field(..., alias="selectedAnswer")


class QuizSubmission(BaseModel):
    answers: list[QuizAnswer]


class QuizAttempt(BaseModel):
    """Immutable record of one graded submission."""

    id: str
    student_id: str
    quiz_id: str
    lesson_id: str
    answers: list[QuizAnswer] = Field(default_factory=list)
    score: int = Field(..., ge=0, le=100)
    passed: bool
    attempted_at: datetime = Field(default_factory=datetime.today)


class QuizSubmissionResult(BaseModel):
    message: str = "Quiz submitted successfully"
    score: int
    passed: bool
    correct_answers: int
    total_questions: int
    passing_score: int
    attempt: QuizAttempt
