"""請求書の描画用ドキュメントを組み立てるユースケース"""
import asyncio
import logging
from typing import Optional

from invoicecraft.domain.exceptions import NotFoundError
from invoicecraft.domain.repositories.company_profile_repository import ICompanyProfileRepository
from invoicecraft.domain.repositories.customer_repository import ICustomerRepository
from invoicecraft.domain.repositories.invoice_repository import IInvoiceRepository
from invoicecraft.domain.repositories.product_repository import IProductRepository
from invoicecraft.domain.services.invoice_presenter import InvoicePresenter
from invoicecraft.domain.value_objects.invoice_document import InvoiceDocument
from invoicecraft.infrastructure.services.logo_loader import LogoLoader

logger = logging.getLogger(__name__)


class BuildInvoiceDocumentUseCase:
    """請求書・顧客・商品・会社情報を集めて InvoiceDocument を作るユースケース

    PDFと画像の両方のエクスポートがこの結果を使う。
    """

    def __init__(
        self,
        invoice_repository: IInvoiceRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
        company_profile_repository: ICompanyProfileRepository,
        logo_loader: Optional[LogoLoader] = None,
        presenter: Optional[InvoicePresenter] = None,
    ):
        self.invoice_repository = invoice_repository
        self.customer_repository = customer_repository
        self.product_repository = product_repository
        self.company_profile_repository = company_profile_repository
        self.logo_loader = logo_loader
        self.presenter = presenter or InvoicePresenter()

    async def execute(self, invoice_id: str) -> InvoiceDocument:
        """描画用ドキュメントを作る

        Raises:
            NotFoundError: 請求書が存在しない場合
        """
        invoice, company_profile, products = await asyncio.gather(
            self.invoice_repository.get_invoice(invoice_id),
            self.company_profile_repository.get_company_profile(),
            self.product_repository.list_products(),
        )
        if invoice is None:
            raise NotFoundError(f"請求書が見つかりません: {invoice_id}")

        customer = await self.customer_repository.get_customer(invoice.customer_id)

        logo = None
        if self.logo_loader and company_profile.logo_url:
            logo = await asyncio.to_thread(self.logo_loader.load, company_profile.logo_url)

        return self.presenter.present(
            invoice,
            customer,
            {product.id: product for product in products},
            company_profile,
            logo=logo,
        )
