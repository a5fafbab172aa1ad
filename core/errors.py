"""Domain errors raised by the parser, trackers and session engine."""


class QuizError(Exception):
    """Base class. The message is shown to the user as-is."""

    default_message = "操作失败"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class NoQuestionsError(QuizError):
    default_message = "没有题目"


class UnrecognizedFormatError(QuizError):
    default_message = "无法识别内容，请检查格式"


class UnsupportedFormatError(QuizError):
    default_message = "仅支持 .txt、.md 和 .docx 文件"


class ProgressExhaustedError(QuizError):
    default_message = "该类型题目已全部做完，可以重置进度重新开始"


class CategoryExistsError(QuizError):
    default_message = "分类已存在"


class CategoryNotFoundError(QuizError):
    default_message = "分类不存在"


class QuestionNotFoundError(QuizError):
    default_message = "题目不存在"


class QuestionNotInSessionError(QuizError):
    default_message = "题目不在当前练习中"


class NoActiveSessionError(QuizError):
    default_message = "当前没有进行中的练习"


class InvalidSessionOperationError(QuizError):
    default_message = "当前练习不支持该操作"


class ConfirmationRequiredError(QuizError):
    default_message = "考试尚未交卷，退出将丢失本次作答进度"


class InvalidSnapshotError(QuizError):
    default_message = "无效的备份数据"
