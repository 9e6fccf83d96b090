"""メインエントリーポイント"""
import argparse
import asyncio
import base64
import logging
import sys
from pathlib import Path
from typing import List, Optional

from invoicecraft.domain.exceptions import InvoiceCraftError
from invoicecraft.domain.services.formatting import format_currency
from invoicecraft.domain.value_objects.application_config import ImageFormat
from invoicecraft.infrastructure.config.config_loader import ConfigLoader
from invoicecraft.infrastructure.logging.logging_setup import LoggingSetup
from invoicecraft.infrastructure.services.service_factory import ServiceFactory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="invoicecraft", description="InvoiceCraft 請求書ツール")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pdf = subparsers.add_parser("export-pdf", help="請求書をPDFに出力する")
    pdf.add_argument("invoice_id")
    pdf.add_argument("--output", type=Path, help="出力先ファイル")

    image = subparsers.add_parser("export-image", help="請求書を画像に出力する")
    image.add_argument("invoice_id")
    image.add_argument("--format", choices=[ImageFormat.PNG, ImageFormat.JPEG], help="画像フォーマット")
    image.add_argument("--output", type=Path, help="出力先ファイル")

    remind = subparsers.add_parser("remind", help="支払いリマインダーの文面を提案する")
    remind.add_argument("invoice_id")
    remind.add_argument("--message", help="調整元の文面")

    subparsers.add_parser("mark-overdue", help="支払期限を過ぎた未払いの請求書を期限超過にする")
    subparsers.add_parser("stats", help="売上と未回収額を集計する")
    return parser


async def run(args: argparse.Namespace, project_root: Path) -> int:
    """サブコマンドを実行する"""
    config_loader = ConfigLoader(project_root)
    config = config_loader.load_config()
    LoggingSetup.setup(config.log_level, project_root)
    logger = logging.getLogger(__name__)

    logger.info(f"=== InvoiceCraft 開始: {args.command} ===")

    factory = ServiceFactory(logger, config, project_root)
    sheets = factory.create_spreadsheet_service(config_loader.load_credentials())
    output_dir = project_root / config.output_dir

    if args.command == "export-pdf":
        result = await factory.create_export_pdf_use_case(sheets).execute(args.invoice_id)
        output = args.output or output_dir / f"{args.invoice_id}.pdf"
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(base64.b64decode(result.pdf_base64))
        logger.info(f"=== 成功: PDFを出力しました: {output} ===")

    elif args.command == "export-image":
        result = await factory.create_export_image_use_case(sheets, args.format).execute(args.invoice_id)
        extension = "jpg" if result.format == ImageFormat.JPEG else "png"
        output = args.output or output_dir / f"{args.invoice_id}.{extension}"
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(base64.b64decode(result.image_url.split(",", 1)[1]))
        logger.info(f"=== 成功: 画像を出力しました: {output} ===")

    elif args.command == "remind":
        suggestion = await factory.create_reminder_use_case(sheets).execute(args.invoice_id, args.message)
        print(suggestion.adjusted_reminder_message)
        if suggestion.reasoning:
            print()
            print(suggestion.reasoning)

    elif args.command == "mark-overdue":
        updated = await factory.create_mark_overdue_use_case(sheets).execute()
        logger.info(f"=== 成功: {len(updated)} 件の請求書を期限超過にしました ===")

    elif args.command == "stats":
        profile = await sheets.get_company_profile()
        stats = await factory.create_dashboard_stats_use_case(sheets).execute()
        currency = profile.currency
        print(f"Total revenue:    {format_currency(stats.total_revenue, currency)} ({stats.paid_count} paid)")
        print(f"Pending payments: {format_currency(stats.pending_amount, currency)} ({stats.pending_count} open)")
        print(f"Total invoices:   {stats.invoice_count}")

    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """メイン処理"""
    args = build_parser().parse_args(argv)
    project_root = Path.cwd()
    try:
        exit_code = asyncio.run(run(args, project_root))
    except InvoiceCraftError as e:
        logging.getLogger(__name__).error(f"=== エラー: {str(e)} ===")
        exit_code = 1
    except Exception as e:
        logger = logging.getLogger(__name__)
        logger.error(f"=== エラー: {str(e)} ===", exc_info=True)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
