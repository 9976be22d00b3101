#!/usr/bin/env python3
"""
배송 가격 엔진 테스트 실행 스크립트

이 스크립트는 영역별 테스트를 실행합니다.
"""

import os
import sys
import subprocess
import argparse
from pathlib import Path


# 테스트 유형별 대상 경로
TARGETS = {
    "all": ("tests/", "전체 테스트"),
    "unit": ("tests/unit/", "단위 테스트"),
    "core": ("tests/unit/core/", "Core 모듈 테스트"),
    "engines": ("tests/unit/engines/", "Engines 모듈 테스트"),
    "adapters": ("tests/unit/adapters/", "Adapters 모듈 테스트"),
    "observability": ("tests/unit/observability/", "Observability 모듈 테스트"),
    "common": ("tests/unit/common/", "Common 모듈 테스트"),
}


def run_command(cmd, description):
    """명령어 실행"""
    print(f"\n{'='*60}")
    print(f"실행 중: {description}")
    print(f"명령어: {' '.join(cmd)}")
    print(f"{'='*60}")

    result = subprocess.run(cmd, capture_output=True, text=True)

    if result.returncode == 0:
        print("성공")
        if result.stdout:
            print(result.stdout)
    else:
        print("실패")
        print(result.stdout)
        if result.stderr:
            print(result.stderr)
        return False

    return True


def main():
    """메인 함수"""
    parser = argparse.ArgumentParser(description="배송 가격 엔진 테스트 실행")
    parser.add_argument("--type", choices=sorted(TARGETS), default="all", help="실행할 테스트 유형")
    parser.add_argument("--coverage", action="store_true", help="코드 커버리지 포함")
    parser.add_argument("--verbose", action="store_true", help="상세 출력")

    args = parser.parse_args()

    # 프로젝트 루트 디렉토리로 이동
    os.chdir(Path(__file__).parent)

    cmd = [sys.executable, "-m", "pytest"]
    if args.verbose:
        cmd.append("-v")
    if args.coverage:
        cmd.extend(["--cov=pricing", "--cov-report=term"])

    path, description = TARGETS[args.type]
    success = run_command(cmd + [path], f"{description} 실행")

    print(f"\n{'='*60}")
    if success:
        print("모든 테스트가 성공적으로 완료되었습니다!")
    else:
        print("일부 테스트가 실패했습니다.")
        sys.exit(1)
    print(f"{'='*60}")


if __name__ == "__main__":
    main()
