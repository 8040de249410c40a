from typing import List, Optional

import numpy as np

from .animal import AnimalFaceClassifier
from .measurements import MeasurementCalculator
from .schemas import (
    EyePoints,
    FacialLandmarks,
    FeatureAnalysis,
    Measurements,
    OverallAssessment,
    PhysiognomyResults,
    Point,
)

FOREHEAD = "이마 (지혜와 사고력)"
EYES = "눈 (감정과 인간관계)"
NOSE = "코 (의지력과 재물운)"
MOUTH = "입 (표현력과 소통능력)"
CHIN = "턱 (인내력과 추진력)"

FEATURE_ORDER = [FOREHEAD, EYES, NOSE, MOUTH, CHIN]

SUMMARIES = {
    "high": "전반적으로 매우 균형잡힌 관상을 가지고 계십니다. 강한 의지력과 따뜻한 마음을 동시에 지니고 있어 리더십을 발휘하면서도 주변 사람들과 원만한 관계를 유지하실 수 있는 분이시네요.",
    "mid": "조화로운 관상을 가지고 계시며, 각 부위별로 고유한 매력과 장점을 지니고 계십니다. 균형잡힌 성격으로 다양한 분야에서 능력을 발휘하실 수 있을 것입니다.",
    "low": "개성있는 관상을 가지고 계시네요. 각 부위별로 독특한 특징들이 있어 특별한 매력을 발산하실 수 있는 분입니다.",
}

LOW_SCORE_ADVICE = [
    "자신의 독특한 매력을 더욱 부각시킬 수 있는 스타일링을 시도해보세요.",
    "내면의 아름다움을 기르는 것이 외모의 조화를 더욱 향상시킬 수 있습니다.",
]
GENERAL_ADVICE = [
    "규칙적인 생활습관과 긍정적인 마음가짐이 관상을 더욱 좋게 만듭니다.",
    "자신만의 장점을 잘 알고 활용하는 것이 중요합니다.",
]

LOW_SCORE_THRESHOLD = 60


def clamp_score(score: float) -> int:
    return int(min(100, max(0, score)))


def analyze_forehead(forehead: List[Point]) -> FeatureAnalysis:
    # 이마 폭은 두 점의 수평 거리, 높이는 추정값
    width = abs(forehead[1].x - forehead[0].x) if len(forehead) >= 2 else 0
    width = width or 50
    height = 30
    ratio = width / height

    score = 70
    interpretation = "균형잡힌 이마를 가지고 계시네요."

    if width > 60:
        score += 10
        interpretation = "넓고 높은 이마를 가지고 계시네요. 전통 관상학에서는 이런 이마를 가진 분을 지적 호기심이 왕성하고 창의적인 사고력을 지닌 사람으로 봅니다."
        traits = ["높은 지능", "창의적 사고", "리더십 기질"]
        detailed = f"이마 폭이 {width:.1f}px로 평균보다 넓어 학습능력과 기억력이 우수하며, 복잡한 문제해결을 즐기는 성향을 보입니다. 비율 {ratio:.2f}:1로 이상적인 황금비율에 근접합니다."
    elif width < 40:
        score -= 5
        interpretation = "아담한 이마를 가지고 계시네요. 실용적이고 현실적인 사고를 하시는 분으로 보입니다."
        traits = ["실용성", "현실적 사고"]
        detailed = f"이마 폭이 {width:.1f}px로 아담하여 집중력이 뛰어나고 세심한 작업을 선호하는 성향을 나타냅니다. 현실적이고 체계적인 사고방식을 가지고 계십니다."
    else:
        traits = ["지적 호기심", "창의성"]
        detailed = f"이마 폭 {width:.1f}px, 높이 {height:.1f}px로 균형잡힌 비율을 보입니다. 논리적 사고와 감성적 판단의 조화로운 균형을 나타냅니다."

    return FeatureAnalysis(
        feature=FOREHEAD,
        score=clamp_score(score),
        interpretation=interpretation,
        meaning="관상학에서 지능과 사고력을 나타냄",
        traits=traits,
        measurements=Measurements(
            width=round(width), height=round(height), ratio=round(ratio, 2)
        ),
        detailed_analysis=detailed,
    )


def analyze_eyes(eyes: EyePoints) -> FeatureAnalysis:
    left_width = 20 if eyes.left else 15
    right_width = 20 if eyes.right else 15
    avg_width = (left_width + right_width) / 2
    symmetry = abs(left_width - right_width)
    distance = 35  # 눈 간격 추정값

    score = 75
    interpretation = "온화하고 따뜻한 눈매를 가지고 계십니다."

    if avg_width > 22:
        score += 10
        interpretation = "크고 표현력이 풍부한 눈을 가지고 계시네요. 이는 타인에 대한 배려심이 깊고 공감 능력이 뛰어난 성격을 나타냅니다."
        traits = ["뛰어난 공감력", "따뜻한 마음", "표현력"]
        detailed = f"눈의 평균 폭이 {avg_width:.1f}px로 큰 편에 속하며, 눈 간격은 {distance}px입니다. 대칭성 지수 {100 - symmetry * 10:.0f}%로 균형잡힌 눈매를 가지고 계십니다. 큰 눈은 감정 표현이 풍부하고 타인의 마음을 잘 읽는 능력을 나타냅니다."
    elif avg_width < 18:
        score += 5
        interpretation = "집중력이 좋고 신중한 성격을 나타내는 눈매를 가지고 계십니다."
        traits = ["집중력", "신중함", "분석력"]
        detailed = f"눈의 평균 폭이 {avg_width:.1f}px로 아담하며, 눈 간격 {distance}px로 적절한 비율을 보입니다. 작은 눈은 집중력이 뛰어나고 세밀한 관찰력을 가진 분석적 성격을 나타냅니다."
    else:
        traits = ["감정 표현", "공감 능력"]
        detailed = f"눈의 평균 폭 {avg_width:.1f}px, 간격 {distance}px로 균형잡힌 비율입니다. 좌우 대칭성 {100 - symmetry * 10:.0f}%로 안정적인 감정 상태와 원만한 대인관계를 나타냅니다."

    return FeatureAnalysis(
        feature=EYES,
        score=clamp_score(score),
        interpretation=interpretation,
        meaning="마음의 창, 감정 표현력을 나타냄",
        traits=traits,
        measurements=Measurements(
            width=round(avg_width),
            distance=round(distance),
            ratio=round(avg_width / distance, 2),
        ),
        detailed_analysis=detailed,
    )


def analyze_nose(nose: List[Point]) -> FeatureAnalysis:
    height = 40 if nose else 35
    width = 15
    ratio = height / width
    angle = 95  # 콧날 각도 추정값

    score = 80
    interpretation = "곧고 균형잡힌 콧날을 가지고 계시네요."

    if height > 45:
        score += 10
        interpretation = "높고 곧은 콧날을 가지고 계시네요. 이는 강한 의지력과 목표 달성 능력, 그리고 좋은 재물운을 의미합니다."
        traits = ["강한 의지력", "목표 지향적", "재물운"]
        detailed = f"코 높이 {height:.1f}px, 폭 {width:.1f}px로 높은 콧날을 가지고 계십니다. 높이-폭 비율 {ratio:.2f}:1로 이상적인 비율이며, 콧날 각도 {angle}°로 강한 의지력과 추진력을 나타냅니다. 높은 코는 전통 관상학에서 재물운과 사회적 지위 상승을 의미합니다."
    elif height < 35:
        score -= 5
        interpretation = "부드럽고 친근한 인상의 코를 가지고 계시네요. 온화하고 협조적인 성격을 나타냅니다."
        traits = ["온화함", "협조성", "친화력"]
        detailed = f"코 높이 {height:.1f}px로 부드러운 인상이며, 폭 {width:.1f}px와의 비율 {ratio:.2f}:1로 조화로운 비율을 보입니다. 낮은 코는 겸손하고 친화적인 성품을 나타내며, 타인과의 협력을 중시하는 성향을 의미합니다."
    else:
        traits = ["의지력", "리더십"]
        detailed = f"코 높이 {height:.1f}px, 폭 {width:.1f}px로 균형잡힌 비율 {ratio:.2f}:1을 보입니다. 콧날 각도 {angle}°로 적절한 형태로, 의지력과 온화함의 조화를 나타냅니다."

    return FeatureAnalysis(
        feature=NOSE,
        score=clamp_score(score),
        interpretation=interpretation,
        meaning="의지력과 경제관념을 나타냄",
        traits=traits,
        measurements=Measurements(
            height=round(height), width=round(width), ratio=round(ratio, 2), angle=round(angle)
        ),
        detailed_analysis=detailed,
    )


def analyze_mouth(mouth: List[Point]) -> FeatureAnalysis:
    width = 25 if mouth else 20
    height = 8  # 입술 두께 추정값
    curvature = 15  # 입꼬리 곡선 추정값

    score = 75
    interpretation = "적당한 크기의 균형잡힌 입술을 가지고 계십니다."

    if width > 30:
        score += 10
        interpretation = "풍부한 표현력을 가진 입술이시네요. 뛰어난 소통 능력과 사교성을 나타냅니다."
        traits = ["뛰어난 소통력", "사교성", "표현력"]
        detailed = f"입술 폭 {width:.1f}px로 넓은 편이며, 두께 {height:.1f}px로 풍성한 입술을 가지고 계십니다. 입꼬리 곡선 {curvature}°로 자연스러운 미소를 띠고 있어 친화력과 사교성이 뛰어난 성격을 나타냅니다. 큰 입은 표현력이 풍부하고 리더십을 발휘하는 성향을 의미합니다."
    elif width < 20:
        score += 5
        interpretation = "신중하고 사려깊은 말씀을 하시는 분으로 보입니다. 깊이있는 대화를 선호하시는 성격입니다."
        traits = ["신중함", "깊이있는 사고", "진중함"]
        detailed = f"입술 폭 {width:.1f}px로 아담하며, 두께 {height:.1f}px로 단정한 입술 모양입니다. 작은 입은 신중하고 사려깊은 성격을 나타내며, 말을 아껴 하지만 할 때는 의미있는 말을 하는 성향을 보입니다."
    else:
        traits = ["소통 능력", "표현력"]
        detailed = f"입술 폭 {width:.1f}px, 두께 {height:.1f}px로 균형잡힌 비율을 보입니다. 입꼬리 곡선 {curvature}°로 자연스러운 표정을 가지고 있어 적절한 소통능력과 표현력을 나타냅니다."

    return FeatureAnalysis(
        feature=MOUTH,
        score=clamp_score(score),
        interpretation=interpretation,
        meaning="언어 능력과 사회성을 나타냄",
        traits=traits,
        measurements=Measurements(
            width=round(width), height=round(height), angle=round(curvature)
        ),
        detailed_analysis=detailed,
    )


def analyze_chin(chin: List[Point], gender: Optional[str] = None) -> FeatureAnalysis:
    # 턱은 성별에 따라 해석이 갈린다 (좌표와 무관)
    width = 40
    sharpness = 75
    prominence = 60

    score = 70
    interpretation = "안정감있는 턱선을 가지고 계시네요."

    if gender == "male":
        score += 10
        interpretation = "남성적이고 결단력있는 턱선을 가지고 계십니다. 리더십과 추진력을 나타냅니다."
        traits = ["리더십", "결단력", "추진력"]
        detailed = f"턱 폭 {width:.1f}px, 각진 정도 {sharpness}%로 남성다운 강한 턱선을 보입니다. 턱 돌출도 {prominence}%로 의지력과 추진력이 강한 성격을 나타냅니다. 각진 턱은 결단력과 리더십을 상징합니다."
    elif gender == "female":
        score += 5
        interpretation = "우아하고 부드러운 턱선을 가지고 계시네요. 조화로운 성격과 배려심을 나타냅니다."
        traits = ["우아함", "배려심", "조화"]
        detailed = f"턱 폭 {width:.1f}px로 적절한 크기이며, 부드러운 곡선 {100 - sharpness}%로 여성스러운 우아함을 나타냅니다. 턱 돌출도 {prominence}%로 온화하면서도 의지가 있는 성격을 보여줍니다."
    else:
        traits = ["안정성", "인내력"]
        detailed = f"턱 폭 {width:.1f}px, 각진 정도 {sharpness}%로 균형잡힌 턱선을 가지고 계십니다. 턱 돌출도 {prominence}%로 안정적인 성격과 적절한 의지력을 나타냅니다."

    return FeatureAnalysis(
        feature=CHIN,
        score=clamp_score(score),
        interpretation=interpretation,
        meaning="의지력과 인내력을 나타냄",
        traits=traits,
        measurements=Measurements(
            width=round(width), angle=round(sharpness), distance=round(prominence)
        ),
        detailed_analysis=detailed,
    )


def generate_summary(average_score: float) -> str:
    if average_score >= 80:
        return SUMMARIES["high"]
    elif average_score >= 65:
        return SUMMARIES["mid"]
    return SUMMARIES["low"]


def generate_recommendations(features: List[FeatureAnalysis]) -> List[str]:
    recommendations = []
    if any(f.score < LOW_SCORE_THRESHOLD for f in features):
        recommendations.extend(LOW_SCORE_ADVICE)
    recommendations.extend(GENERAL_ADVICE)
    return recommendations


class PhysiognomyEngine:
    """
    랜드마크 그룹 → 관상 분석 결과.
    balance / harmony / 동물상 점수에는 난수가 섞이므로 같은 입력이라도
    호출마다 값이 달라진다. 재현이 필요하면 seed 된 Generator 를 넘긴다.
    """

    BALANCE_RANGE = (75, 95)
    HARMONY_RANGE = (70, 95)

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.measurements = MeasurementCalculator()
        self.animal = AnimalFaceClassifier(rng=self.rng)

    def analyze_features(
        self, landmarks: FacialLandmarks, gender: Optional[str] = None
    ) -> List[FeatureAnalysis]:
        return [
            analyze_forehead(landmarks.forehead),
            analyze_eyes(landmarks.eyes),
            analyze_nose(landmarks.nose),
            analyze_mouth(landmarks.mouth),
            analyze_chin(landmarks.chin, gender),
        ]

    def overall(self, features: List[FeatureAnalysis]) -> OverallAssessment:
        balance = int(self.rng.integers(*self.BALANCE_RANGE))
        harmony = int(self.rng.integers(*self.HARMONY_RANGE))
        average_score = sum(f.score for f in features) / len(features)
        return OverallAssessment(
            balance=balance, harmony=harmony, summary=generate_summary(average_score)
        )

    def analyze(
        self, landmarks: FacialLandmarks, gender: Optional[str] = None
    ) -> PhysiognomyResults:
        features = self.analyze_features(landmarks, gender)
        overall = self.overall(features)
        detailed = self.measurements.calculate(landmarks)
        animal_face = self.animal.classify(features)

        return PhysiognomyResults(
            overall=overall,
            features=features,
            recommendations=generate_recommendations(features),
            animal_face=animal_face,
            detailed_measurements=detailed,
        )


def analyze_physiognomy(
    landmarks: FacialLandmarks,
    gender: Optional[str] = None,
    rng: Optional[np.random.Generator] = None,
) -> PhysiognomyResults:
    return PhysiognomyEngine(rng=rng).analyze(landmarks, gender)
