#!/usr/bin/env python3
"""
광고 성과 리포트 파이프라인 CLI

사용법:
    # 전체 파이프라인 실행 (파싱 → PDF → 데이터 패키지)
    python3 scripts/run_report.py reports/campaign.xlsx

    # 특정 단계만 실행 (parse 이후 단계는 output/report_data.json 재사용)
    python3 scripts/run_report.py reports/campaign.xlsx --step parse
    python3 scripts/run_report.py reports/campaign.xlsx --step pdf --month 02
    python3 scripts/run_report.py reports/campaign.xlsx --step package --client-key acme

    # AI 진단 포함 (GEMINI_API_KEY 필요)
    python3 scripts/run_report.py reports/campaign.xlsx --insight
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from adreport.parsers.base import ReportParseError
from adreport.report.extractor import extract_report_data, load_extracted_data, save_extracted_data
from adreport.report.insight import generate_insight
from adreport.report.packager import build_package_zip, default_client_key, get_package_filename, normalize_client_key, write_package
from adreport.report.pdf_generator import generate_report_pdf, get_pdf_filename
from adreport.report.view import ALL_MONTHS, available_months
from adreport.settings import load_settings

REPORT_DATA_FILENAME = "report_data.json"


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="광고 성과 리포트 파이프라인",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("file", help="광고 성과 엑셀/CSV 파일")

    parser.add_argument(
        "--step",
        "-s",
        choices=["parse", "pdf", "package", "all"],
        default="all",
        help="실행할 단계 (기본: all)",
    )

    parser.add_argument(
        "--client-key",
        "-c",
        default=None,
        help="데이터 패키지 거래처 키 (기본: 광고주명에서 생성)",
    )

    parser.add_argument(
        "--month",
        "-m",
        default=ALL_MONTHS,
        help="PDF에 표시할 월 (예: 02, 기본: all)",
    )

    parser.add_argument(
        "--output-dir",
        "-o",
        default=None,
        help="출력 디렉토리 (기본: 설정의 output_dir)",
    )

    parser.add_argument(
        "--advertiser",
        "-a",
        default=None,
        help="시트에 광고주가 없을 때 사용할 광고주명",
    )

    parser.add_argument(
        "--insight",
        action="store_true",
        help="AI 캠페인 진단 생성 (패키지에 포함)",
    )

    args = parser.parse_args(argv)

    settings = load_settings()
    if args.advertiser:
        settings = replace(settings, default_advertiser=args.advertiser)
    output_dir = Path(args.output_dir) if args.output_dir else settings.output_dir

    print(f"\n{'='*70}")
    print("광고 성과 리포트 파이프라인")
    print(f"{'='*70}")
    print(f"파일: {args.file}")
    print(f"단계: {args.step}")
    print(f"월: {args.month}")
    print(f"출력: {output_dir}")
    print(f"{'='*70}\n")

    try:
        # Step 1: 파싱
        data_path = output_dir / REPORT_DATA_FILENAME
        if args.step in ("parse", "all"):
            print("📄 Step 1: 리포트 데이터 추출")
            print("-" * 70)
            run_parse_step(args.file, settings, data_path)
            print()
        else:
            print("⏭️  Step 1 스킵 (기존 데이터 사용)")

        report = load_extracted_data(str(data_path))
        print(f"   로드: {report.summary.name} / {len(report.rows)}행\n")

        insight = ""
        if args.insight:
            print("🤖 AI 캠페인 진단")
            print("-" * 70)
            insight = generate_insight(report, api_key=settings.gemini_api_key, model=settings.gemini_model)
            print(insight or "ℹ️  GEMINI_API_KEY 미설정, 진단 생략")
            print()

        # Step 2: PDF
        if args.step in ("pdf", "all"):
            print("📋 Step 2: 리포트 PDF 생성")
            print("-" * 70)
            if args.month != ALL_MONTHS and args.month not in available_months(report.rows):
                print(f"❌ {args.month}월 데이터가 없습니다 (가능: {', '.join(available_months(report.rows))})")
                return False
            pdf_path = output_dir / get_pdf_filename(report.summary.advertiser)
            generate_report_pdf(report, str(pdf_path), month=args.month, insight=insight)
            print(f"✅ PDF 생성 완료: {pdf_path.name}")
            print()

        # Step 3: 데이터 패키지
        if args.step in ("package", "all"):
            print("📦 Step 3: 거래처 데이터 패키지")
            print("-" * 70)
            client_key = args.client_key or default_client_key(report.summary.advertiser)
            run_package_step(report, client_key, output_dir, insight)
            print()

        print(f"{'='*70}")
        print("✅ 리포트 파이프라인 완료!")
        print(f"{'='*70}")
        print(f"\n📁 출력 파일: {output_dir}/\n")

        return True

    except ReportParseError as e:
        print(f"\n❌ 파싱 실패: {e}")
        return False
    except Exception as e:
        print(f"\n❌ 오류 발생: {e}")
        import traceback
        traceback.print_exc()
        return False


def run_parse_step(file_path: str, settings, data_path: Path) -> dict:
    """Step 1: 파일 파싱 → report_data.json"""
    data = extract_report_data(file_path, keywords=settings.keywords, defaults=settings.report_defaults)
    save_extracted_data(data, str(data_path))

    summary = data["summary"]
    print(f"✅ 추출 완료: {data['row_count']}행")
    print(f"   광고주: {summary['advertiser']}")
    print(f"   캠페인: {summary['name']}")
    print(f"   기간: {summary['period']}")
    print(f"   노출 {summary['totalImpressions']:,} / 클릭 {summary['totalClicks']:,} / CTR {summary['avgCtr']}%")
    print(f"   월: {', '.join(data['months']) or '-'}")
    return data


def run_package_step(report, client_key: str, output_dir: Path, insight: str = "") -> str:
    """Step 3: zip 저장 + 디렉토리 배포"""
    client_key = normalize_client_key(client_key)
    zip_path = output_dir / get_package_filename(report.summary.advertiser)
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    zip_path.write_bytes(build_package_zip(report, client_key, insight))

    files = write_package(report, client_key, output_dir, insight)

    print(f"✅ 패키지 생성 완료: {zip_path.name}")
    print(f"   거래처 키: {client_key}")
    print(f"   파일: {len(files)}개 (data/{client_key}/)")
    return str(zip_path)


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
