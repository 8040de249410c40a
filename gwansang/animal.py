from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from .schemas import AnimalFaceAnalysis, FeatureAnalysis, SecondaryAnimal


@dataclass(frozen=True)
class AnimalArchetype:
    name: str
    keywords: Tuple[str, ...]
    traits: Tuple[str, ...]


ANIMALS = [
    AnimalArchetype("고양이상", ("큰 눈", "작은 코", "V라인"), ("매력적", "신비로운", "독립적")),
    AnimalArchetype("강아지상", ("둥근 눈", "친근한 입", "부드러운"), ("친근한", "충성스러운", "활발한")),
    AnimalArchetype("토끼상", ("큰 눈", "작은 입", "둥근 얼굴"), ("귀여운", "순수한", "온순한")),
    AnimalArchetype("여우상", ("날카로운 눈", "뾰족한 턱", "각진"), ("영리한", "매혹적", "카리스마")),
    AnimalArchetype("사슴상", ("큰 눈", "긴 얼굴", "우아한"), ("우아한", "순수한", "청순한")),
    AnimalArchetype("곰상", ("둥근 얼굴", "큰 코", "부드러운"), ("온화한", "든든한", "포근한")),
    AnimalArchetype("늑대상", ("날카로운", "강한 턱", "깊은 눈"), ("카리스마", "강인한", "리더십")),
    AnimalArchetype("햄스터상", ("둥근 얼굴", "작은 눈", "통통한"), ("귀여운", "친근한", "애교")),
]

# (부위, 동물 키워드, 분석 결과 특성, 가산점)
MATCH_RULES = [
    ("눈", "큰 눈", "뛰어난 공감력", 30),
    ("눈", "둥근 눈", "따뜻한 마음", 25),
    ("눈", "날카로운 눈", "분석력", 25),
    ("눈", "작은 눈", "집중력", 20),
    ("코", "작은 코", "온화함", 20),
    ("코", "큰 코", "강한 의지력", 25),
    ("턱", "V라인", "우아함", 25),
    ("턱", "강한 턱", "리더십", 30),
    ("턱", "뾰족한 턱", "결단력", 25),
]

JITTER_RANGE = (10, 30)
PRIMARY_RANGE = (60, 95)
SECONDARY_RANGE = (10, 40)
SECONDARY_OFFSET = 20
SECONDARY_COUNT = 3


def _find_feature(features: List[FeatureAnalysis], region: str) -> Optional[FeatureAnalysis]:
    for f in features:
        if f.feature.startswith(region):
            return f
    return None


def _clamp(value: int, bounds: Tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, value))


class AnimalFaceClassifier:
    """
    부위별 특성과 8가지 동물상 키워드를 대조해 점수를 매기고,
    난수 가산점을 더해 가장 높은 동물상을 고른다.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def match_score(self, animal: AnimalArchetype, features: List[FeatureAnalysis]) -> int:
        score = 0
        for region, keyword, trait, points in MATCH_RULES:
            feature = _find_feature(features, region)
            if feature is None:
                continue
            if keyword in animal.keywords and trait in feature.traits:
                score += points
        return score

    def score_animals(self, features: List[FeatureAnalysis]) -> List[Tuple[AnimalArchetype, int]]:
        scored = [
            (animal, self.match_score(animal, features) + int(self.rng.integers(*JITTER_RANGE)))
            for animal in ANIMALS
        ]
        # sorted() is stable: ties keep table order
        return sorted(scored, key=lambda item: item[1], reverse=True)

    def classify(self, features: List[FeatureAnalysis]) -> AnimalFaceAnalysis:
        ranked = self.score_animals(features)
        primary, primary_score = ranked[0]

        secondary = [
            SecondaryAnimal(
                animal=animal.name,
                percentage=_clamp(score - SECONDARY_OFFSET, SECONDARY_RANGE),
                reason=f"{', '.join(animal.traits[:2])} 특성이 보임",
            )
            for animal, score in ranked[1 : 1 + SECONDARY_COUNT]
        ]

        return AnimalFaceAnalysis(
            primary_animal=primary.name,
            percentage=_clamp(primary_score, PRIMARY_RANGE),
            characteristics=list(primary.traits),
            description=describe(primary),
            secondary_animals=secondary,
        )


def describe(animal: AnimalArchetype) -> str:
    short_name = animal.name.replace("상", "")
    return (
        f"당신은 {animal.name}의 특징을 가지고 계시네요. "
        f"{', '.join(animal.traits)}한 매력이 돋보이며, "
        f"이는 {short_name}처럼 {animal.traits[0]}하고 {animal.traits[1]}한 인상을 줍니다. "
        f"특히 얼굴의 전반적인 조화와 각 부위의 특징이 {animal.name}의 매력적인 특성과 잘 어울립니다."
    )
