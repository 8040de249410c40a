import numpy as np

from gwansang.rules import (
    FEATURE_ORDER,
    GENERAL_ADVICE,
    LOW_SCORE_ADVICE,
    SUMMARIES,
    PhysiognomyEngine,
    analyze_physiognomy,
    analyze_chin,
    analyze_eyes,
    analyze_forehead,
    analyze_mouth,
    analyze_nose,
    clamp_score,
    generate_recommendations,
    generate_summary,
)
from gwansang.schemas import EyePoints, Point


def forehead_of_width(width):
    return [Point(x=100, y=50), Point(x=100 + width, y=50)]


def test_forehead_wide_selects_pronounced_branch():
    result = analyze_forehead(forehead_of_width(65))
    assert result.score == 80
    assert result.traits == ["높은 지능", "창의적 사고", "리더십 기질"]
    assert result.measurements.width == 65
    assert result.measurements.height == 30
    assert result.measurements.ratio == 2.17
    assert "65.0px" in result.detailed_analysis


def test_forehead_narrow_selects_subdued_branch():
    result = analyze_forehead(forehead_of_width(35))
    assert result.score == 65
    assert result.traits == ["실용성", "현실적 사고"]


def test_forehead_middle_and_missing_points_are_neutral():
    assert analyze_forehead(forehead_of_width(50)).score == 70
    # 점이 없으면 폭 50 으로 간주
    result = analyze_forehead([])
    assert result.score == 70
    assert result.traits == ["지적 호기심", "창의성"]
    assert result.measurements.width == 50


def test_eyes_use_fixed_widths():
    present = analyze_eyes(EyePoints(left=[Point(x=0, y=0)], right=[Point(x=1, y=0)]))
    assert present.score == 75
    assert present.traits == ["감정 표현", "공감 능력"]
    assert present.measurements.distance == 35
    assert "대칭성 100%" in present.detailed_analysis

    missing = analyze_eyes(EyePoints(left=[], right=[]))
    assert missing.score == 80
    assert missing.traits == ["집중력", "신중함", "분석력"]


def test_nose_and_mouth_stay_in_neutral_branch():
    assert analyze_nose([Point(x=0, y=0)]).score == 80
    assert analyze_nose([]).traits == ["의지력", "리더십"]
    nose = analyze_nose([Point(x=0, y=0)])
    assert nose.measurements.angle == 95
    assert nose.measurements.ratio == 2.67

    assert analyze_mouth([Point(x=0, y=0)]).score == 75
    assert analyze_mouth([]).traits == ["소통 능력", "표현력"]


def test_chin_follows_gender_regardless_of_geometry():
    far = [Point(x=5000, y=-300)]
    male = analyze_chin(far, "male")
    assert male.score == 80
    assert male.traits == ["리더십", "결단력", "추진력"]
    assert male.interpretation.startswith("남성적이고")
    assert analyze_chin([], "male").traits == male.traits

    female = analyze_chin(far, "female")
    assert female.score == 75
    assert female.traits == ["우아함", "배려심", "조화"]
    assert "부드러운 곡선 25%" in female.detailed_analysis

    neutral = analyze_chin(far, None)
    assert neutral.score == 70
    assert neutral.traits == ["안정성", "인내력"]


def test_clamp_score():
    assert clamp_score(120) == 100
    assert clamp_score(-5) == 0
    assert clamp_score(64) == 64


def test_summary_thresholds():
    assert generate_summary(80) == SUMMARIES["high"]
    assert generate_summary(65) == SUMMARIES["mid"]
    assert generate_summary(64.9) == SUMMARIES["low"]


def test_recommendations_add_encouragement_for_low_scores():
    features = [analyze_forehead(forehead_of_width(50))]
    assert generate_recommendations(features) == GENERAL_ADVICE

    low = features[0].model_copy(update={"score": 55})
    assert generate_recommendations([low]) == LOW_SCORE_ADVICE + GENERAL_ADVICE


def test_engine_emits_five_features_in_fixed_order(landmarks):
    results = PhysiognomyEngine(rng=np.random.default_rng(7)).analyze(landmarks)
    assert [f.feature for f in results.features] == FEATURE_ORDER
    assert all(0 <= f.score <= 100 for f in results.features)
    # template forehead is wide: (80 + 75 + 80 + 75 + 70) / 5 = 76
    assert results.overall.summary == SUMMARIES["mid"]
    assert results.recommendations == GENERAL_ADVICE


def test_balance_and_harmony_stay_in_range(landmarks):
    engine = PhysiognomyEngine()
    for _ in range(50):
        overall = engine.analyze(landmarks, gender="female").overall
        assert 75 <= overall.balance <= 95
        assert 70 <= overall.harmony <= 95


def test_engine_uses_injected_rng(landmarks, fixed_rng):
    results = PhysiognomyEngine(rng=fixed_rng(80)).analyze(landmarks)
    assert results.overall.balance == 80
    assert results.overall.harmony == 80


def test_analyze_physiognomy_entry_point(landmarks):
    results = analyze_physiognomy(landmarks, "male", rng=np.random.default_rng(1))
    assert len(results.features) == 5
    assert results.features[4].score == 80
    assert results.detailed_measurements.jawline_angle == 125


def test_measurements_serialize_integers_and_skip_unmeasured():
    forehead = analyze_forehead(forehead_of_width(65.4))
    assert forehead.measurements.model_dump() == {"width": 65, "height": 30, "ratio": 2.18}
    assert forehead.measurements.model_dump_json() == '{"width":65,"height":30,"ratio":2.18}'

    chin = analyze_chin([], "male").model_dump()["measurements"]
    assert chin == {"width": 40, "angle": 75, "distance": 60}
