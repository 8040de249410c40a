import argparse
import json
import sys

from gwansang.analyzer import FaceAnalyzer
from gwansang.config import configure_logging, get_settings
from gwansang.detector import load_detector
from gwansang.errors import FaceAnalysisError


def print_report(results) -> None:
    overall = results.overall
    animal = results.animal_face
    m = results.detailed_measurements

    print("\n" + "=" * 40)
    print("        관상 분석 결과 (PHYSIOGNOMY)        ")
    print("=" * 40)
    print(f"균형도 : {overall.balance}")
    print(f"조화도 : {overall.harmony}")
    print(f"총평   : {overall.summary}")
    print("-" * 40)

    for f in results.features:
        print(f"[{f.feature}] {f.score}점 - {', '.join(f.traits)}")
        print(f"  {f.interpretation}")

    print("-" * 40)
    print(f"동물상 : {animal.primary_animal} ({animal.percentage}%)")
    for s in animal.secondary_animals:
        print(f"  - {s.animal:<6} {s.percentage:>3}%  {s.reason}")

    print("-" * 40)
    print(
        f"얼굴 비율 {m.face_ratio:.2f} / 눈 간격 {m.eye_distance}px / "
        f"코-입 비율 {m.nose_to_mouth_ratio:.2f}"
    )
    print("\n[추천]")
    for r in results.recommendations:
        print(f"  - {r}")


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Face Physiognomy (관상) Analysis")
    parser.add_argument("image_path", nargs="?", help="Path to the face image file")
    parser.add_argument("--gender", choices=["male", "female"], default=None)
    parser.add_argument("--mock", action="store_true", help="Use the template detector")
    parser.add_argument("--model", default=settings.model_path, help="FaceLandmarker .task file")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API instead")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()
    configure_logging(settings.log_level)

    if args.serve:
        import uvicorn

        uvicorn.run("gwansang.main:app", host=args.host, port=args.port)
        return

    if not args.image_path:
        parser.error("image_path is required unless --serve is given")

    try:
        handle = load_detector(args.model, use_mock=args.mock or settings.use_mock)
    except FaceAnalysisError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    try:
        outcome = FaceAnalyzer(handle).analyze_image(args.image_path, gender=args.gender)
    except FaceAnalysisError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        handle.close()

    if args.json:
        print(
            json.dumps(
                {
                    "landmarks": outcome.landmarks.model_dump(),
                    "results": outcome.results.model_dump(),
                },
                ensure_ascii=False,
                indent=2,
            )
        )
    else:
        print_report(outcome.results)


if __name__ == "__main__":
    main()
