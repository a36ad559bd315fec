import pytest

from qa_admin.errors import InferenceError
from qa_admin.models.review import SentimentLabel
from qa_admin.services.sentiment.normalizer import normalize_sentiment_output


def test_picks_greatest_probability_and_maps_labels():
    outcome = normalize_sentiment_output(
        [[
            {"label": "LABEL_1", "score": 0.7},
            {"label": "LABEL_0", "score": 0.2},
            {"label": "LABEL_2", "score": 0.1},
        ]]
    )
    assert outcome.label == SentimentLabel.positive
    assert outcome.score == pytest.approx(0.7)
    assert outcome.scores.as_dict() == {"negative": 0.2, "positive": 0.7, "neutral": 0.1}


def test_missing_classes_default_to_zero():
    outcome = normalize_sentiment_output([[{"label": "LABEL_0", "score": 0.55}]])
    assert outcome.label == SentimentLabel.negative
    assert outcome.scores.positive == 0.0
    assert outcome.scores.neutral == 0.0


def test_ties_go_to_first_in_response_order():
    outcome = normalize_sentiment_output(
        [[{"label": "LABEL_2", "score": 0.5}, {"label": "LABEL_1", "score": 0.5}]]
    )
    assert outcome.label == SentimentLabel.neutral


def test_flat_class_list_is_accepted():
    outcome = normalize_sentiment_output([{"label": "LABEL_1", "score": 0.9}])
    assert outcome.label == SentimentLabel.positive


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        [[]],
        {"error": "Model is loading"},
        [["LABEL_1"]],
        [[{"label": "LABEL_9", "score": 0.9}]],
        [[{"label": "LABEL_1", "score": "high"}]],
        [[{"label": ["LABEL_1"], "score": 0.9}]],
        [[{"label": {"id": 1}, "score": 0.9}]],
        [[{"label": "LABEL_1", "score": 7.5}]],
        [[{"label": "LABEL_0", "score": -0.1}]],
    ],
)
def test_malformed_payloads_raise_inference_error(payload):
    with pytest.raises(InferenceError) as exc_info:
        normalize_sentiment_output(payload)
    assert exc_info.value.status_code == 502
