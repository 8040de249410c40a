import numpy as np

from gwansang.animal import ANIMALS, AnimalFaceClassifier, describe
from gwansang.rules import PhysiognomyEngine
from gwansang.schemas import EyePoints


def features_for(landmarks, gender=None):
    return PhysiognomyEngine().analyze_features(landmarks, gender)


def by_name(name):
    return next(a for a in ANIMALS if a.name == name)


def test_table_has_eight_archetypes():
    assert len(ANIMALS) == 8
    assert ANIMALS[0].name == "고양이상"


def test_match_score_uses_eye_nose_chin_traits(landmarks):
    classifier = AnimalFaceClassifier()

    male = features_for(landmarks, "male")
    assert classifier.match_score(by_name("늑대상"), male) == 30
    assert classifier.match_score(by_name("여우상"), male) == 25

    female = features_for(landmarks, "female")
    assert classifier.match_score(by_name("고양이상"), female) == 25

    # 눈 점이 없으면 "집중력/분석력" 가지
    no_eyes = landmarks.model_copy(update={"eyes": EyePoints(left=[], right=[])})
    features = features_for(no_eyes)
    assert classifier.match_score(by_name("여우상"), features) == 25
    assert classifier.match_score(by_name("햄스터상"), features) == 20


def test_ties_keep_table_order(landmarks, fixed_rng):
    result = AnimalFaceClassifier(rng=fixed_rng(20)).classify(features_for(landmarks))

    assert result.primary_animal == "고양이상"
    assert result.percentage == 60
    assert [s.animal for s in result.secondary_animals] == ["강아지상", "토끼상", "여우상"]
    assert all(s.percentage == 10 for s in result.secondary_animals)
    assert result.secondary_animals[0].reason == "친근한, 충성스러운 특성이 보임"


def test_sole_match_always_wins(landmarks):
    # 고양이상 25 + jitter(>=10) 는 매칭 없는 동물의 최대값 29 보다 항상 크다
    features = features_for(landmarks, "female")
    for seed in range(20):
        result = AnimalFaceClassifier(rng=np.random.default_rng(seed)).classify(features)
        assert result.primary_animal == "고양이상"
        assert result.characteristics == ["매력적", "신비로운", "독립적"]


def test_percentages_stay_in_documented_ranges(landmarks):
    classifier = AnimalFaceClassifier()
    for gender in (None, "male", "female"):
        features = features_for(landmarks, gender)
        for _ in range(30):
            result = classifier.classify(features)
            assert 60 <= result.percentage <= 95
            assert len(result.secondary_animals) == 3
            names = [result.primary_animal] + [s.animal for s in result.secondary_animals]
            assert len(set(names)) == 4
            for s in result.secondary_animals:
                assert 10 <= s.percentage <= 40


def test_describe():
    text = describe(by_name("곰상"))
    assert text.startswith("당신은 곰상의 특징을 가지고 계시네요.")
    assert "곰처럼 온화한하고 든든한한 인상을 줍니다." in text
