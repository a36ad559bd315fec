from qa_admin.models.evaluation import KPI_CATEGORIES, Evaluation  # noqa: F401
from qa_admin.models.review import CustomerReview, ReviewSource, SentimentLabel, SentimentResult  # noqa: F401
from qa_admin.models.user import User, UserRole  # noqa: F401
