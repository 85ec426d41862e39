"""
Inventory — Service Layer

BalanceService (balance records), MovementLog (insert-only trail),
AdjustmentService (the only code path that changes a quantity) and
ReconciliationService (product totals, stock summary, stats).

Every quantity change runs in one transaction: the balance row is locked,
written with a version compare-and-swap, and the matching movement is
appended before commit. A stale version means another writer won; the
whole unit is retried from a fresh read.

@file inventory/services.py
"""

import enum
import logging
from itertools import groupby
from operator import attrgetter
from typing import Any, Callable
from uuid import UUID

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.paginator import EmptyPage, Paginator
from django.db import IntegrityError, transaction
from django.db.models import F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from catalog.models import Product, Warehouse
from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_SOFT_DELETE,
    AUDIT_ACTION_UPDATE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)
from core.exceptions import (
    BusinessRuleViolation,
    ConcurrentUpdateError,
    DuplicateResourceError,
    InsufficientStockError,
    ResourceNotFoundError,
)
from core.services import AuditService

from .models import BASE_VARIANT, StockBalance, StockMovement

logger = logging.getLogger('stockroom')


class OnInsufficientStock(enum.Enum):
    """What a deduction does when it would take the balance below zero."""
    REJECT = 'reject'
    CLAMP_TO_ZERO = 'clamp_to_zero'


QUICK_ADJUST_OPERATIONS = ('add', 'deduct')
PATCHABLE_FIELDS = {'quantity', 'reorder_point'}


class _StaleBalance(Exception):
    """The balance version changed between read and write."""


class _NoChange(Exception):
    """A correction that leaves the quantity where it already is."""

    def __init__(self, balance: StockBalance):
        super().__init__(str(balance.pk))
        self.balance = balance


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalize_variant(variant_name: str | None) -> str:
    return (variant_name or BASE_VARIANT).strip()


def display_variant(variant_name: str) -> str | None:
    return variant_name or None


def _actor(actor):
    return actor if getattr(actor, 'is_authenticated', False) else None


def _require_positive(value, field: str = 'quantity') -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise BusinessRuleViolation(detail=f'{field} must be a positive integer.')
    return value


def _require_non_negative(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise BusinessRuleViolation(detail=f'{field} must be an integer >= 0.')
    return value


def _get_active_balance(balance_id, *, lock: bool = False) -> StockBalance:
    """Load a non-deleted balance, optionally under SELECT ... FOR UPDATE."""
    qs = StockBalance.objects.filter(is_deleted=False)
    if lock:
        qs = qs.select_for_update()
    try:
        return qs.get(pk=balance_id)
    except (StockBalance.DoesNotExist, ValidationError, ValueError):
        raise ResourceNotFoundError(detail='Stock not found.')


def _get_product(product_id) -> Product:
    try:
        return Product.objects.get(pk=product_id, is_deleted=False)
    except (Product.DoesNotExist, ValidationError, ValueError):
        raise ResourceNotFoundError(detail='Product not found.')


def _get_warehouse(warehouse_id) -> Warehouse:
    try:
        return Warehouse.objects.get(pk=warehouse_id, is_deleted=False)
    except (Warehouse.DoesNotExist, ValidationError, ValueError):
        raise ResourceNotFoundError(detail='Warehouse not found.')


# ---------------------------------------------------------------------------
# Movement log
# ---------------------------------------------------------------------------

class MovementLog:
    """Insert-only ledger trail. Read for audit only, never to derive a balance."""

    @staticmethod
    def append(
        *,
        balance: StockBalance,
        kind: str,
        quantity: int,
        requested_quantity: int,
        previous_quantity: int,
        new_quantity: int,
        notes: str = '',
        actor=None,
        reference_type: str = '',
        reference_id: UUID | None = None,
    ) -> StockMovement:
        movement = StockMovement.objects.create(
            balance=balance,
            product_id=balance.product_id,
            variant_name=balance.variant_name,
            warehouse_id=balance.warehouse_id,
            kind=kind,
            sequence=balance.version,
            quantity=quantity,
            requested_quantity=requested_quantity,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            notes=notes or '',
            reference_type=reference_type or '',
            reference_id=reference_id,
            created_by=_actor(actor),
        )
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='StockMovement',
            object_id=str(movement.pk),
            new_values={
                'balance_id': str(balance.pk),
                'kind': kind,
                'quantity': quantity,
                'requested_quantity': requested_quantity,
                'previous_quantity': previous_quantity,
                'new_quantity': new_quantity,
            },
        )
        logger.info(
            'StockMovement %s %s %+d balance=%s %d->%d',
            movement.pk, kind, quantity, balance.pk, previous_quantity, new_quantity,
        )
        return movement

    @staticmethod
    def list_by_balance(product_id, variant_name: str | None, warehouse_id):
        """Chronological movements for one identity triple, across re-created balances."""
        return StockMovement.objects.filter(
            product_id=product_id,
            variant_name=normalize_variant(variant_name),
            warehouse_id=warehouse_id,
        ).order_by('created_at', 'sequence')

    @staticmethod
    def list(*, product_id=None, warehouse_id=None, kind: str | None = None):
        qs = StockMovement.objects.select_related('product', 'warehouse')
        if product_id:
            qs = qs.filter(product_id=product_id)
        if warehouse_id:
            qs = qs.filter(warehouse_id=warehouse_id)
        if kind:
            qs = qs.filter(kind=kind)
        return qs.order_by('-created_at', '-sequence')


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------

class AdjustmentService:
    """Atomic balance update + movement append, with one deduction policy switch."""

    @staticmethod
    def apply(
        *,
        balance_id,
        delta: int,
        kind: str = StockMovement.Kind.ADJUSTMENT,
        on_insufficient: OnInsufficientStock = OnInsufficientStock.REJECT,
        notes: str = '',
        actor=None,
        reference_type: str = '',
        reference_id: UUID | None = None,
    ) -> tuple[StockBalance, StockMovement]:
        """Apply a signed, non-zero delta to a balance and ledger it."""
        if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
            raise BusinessRuleViolation(detail='Quantity change must be a non-zero integer.')
        return AdjustmentService._run(
            balance_id=balance_id,
            delta_for=lambda previous: delta,
            kind=kind,
            on_insufficient=on_insufficient,
            notes=notes,
            actor=actor,
            reference_type=reference_type,
            reference_id=reference_id,
        )

    @staticmethod
    def adjust(
        *,
        balance_id,
        quantity: int,
        reason: str,
        kind: str = StockMovement.Kind.ADJUSTMENT,
        actor=None,
    ) -> StockBalance:
        """Strict deduction: fails with InsufficientStockError rather than going below zero."""
        _require_positive(quantity)
        if not reason or not str(reason).strip():
            raise BusinessRuleViolation(detail='Reason is required.')
        balance, _ = AdjustmentService.apply(
            balance_id=balance_id,
            delta=-quantity,
            kind=kind,
            on_insufficient=OnInsufficientStock.REJECT,
            notes=reason,
            actor=actor,
        )
        return balance

    @staticmethod
    def quick_adjust(
        *,
        balance_id,
        operation: str,
        quantity: int,
        notes: str | None = None,
        actor=None,
    ) -> tuple[StockBalance, StockMovement]:
        """Add or deduct; a deduction larger than the stock on hand clamps to zero."""
        if operation not in QUICK_ADJUST_OPERATIONS:
            raise BusinessRuleViolation(detail=f'operation must be one of {", ".join(QUICK_ADJUST_OPERATIONS)}.')
        _require_positive(quantity)
        delta = quantity if operation == 'add' else -quantity
        return AdjustmentService.apply(
            balance_id=balance_id,
            delta=delta,
            kind=StockMovement.Kind.ADJUSTMENT,
            on_insufficient=OnInsufficientStock.CLAMP_TO_ZERO,
            notes=notes or f'Stock {operation}: {quantity} units',
            actor=actor,
        )

    @staticmethod
    def set_quantity(
        *,
        balance_id,
        quantity: int,
        notes: str = 'Manual correction',
        actor=None,
    ) -> tuple[StockBalance, StockMovement | None]:
        """
        Ledgered manual correction to an absolute quantity. The delta is
        computed against the locked row; no movement is written when the
        quantity is already at the target.
        """
        _require_non_negative(quantity, 'quantity')
        try:
            return AdjustmentService._run(
                balance_id=balance_id,
                delta_for=lambda previous: quantity - previous,
                kind=StockMovement.Kind.ADJUSTMENT,
                on_insufficient=OnInsufficientStock.REJECT,
                notes=notes,
                actor=actor,
            )
        except _NoChange as exc:
            return exc.balance, None

    @staticmethod
    def _run(
        *,
        balance_id,
        delta_for: Callable[[int], int],
        kind: str,
        on_insufficient: OnInsufficientStock,
        notes: str,
        actor,
        reference_type: str = '',
        reference_id: UUID | None = None,
    ) -> tuple[StockBalance, StockMovement]:
        if kind not in StockMovement.Kind.values:
            raise BusinessRuleViolation(detail=f'Invalid movement kind: {kind}')

        max_attempts = settings.INVENTORY_ADJUST_MAX_RETRIES
        for attempt in range(1, max_attempts + 1):
            try:
                with transaction.atomic():
                    balance, movement = AdjustmentService._write_once(
                        balance_id=balance_id,
                        delta_for=delta_for,
                        kind=kind,
                        on_insufficient=on_insufficient,
                        notes=notes,
                        actor=actor,
                        reference_type=reference_type,
                        reference_id=reference_id,
                    )
            except _StaleBalance:
                logger.warning(
                    'Stale stock balance %s (attempt %d/%d); retrying.',
                    balance_id, attempt, max_attempts,
                )
                continue
            break
        else:
            raise ConcurrentUpdateError()

        ReconciliationService.sync_product_total(balance.product_id)
        return balance, movement

    @staticmethod
    def _write_once(
        *,
        balance_id,
        delta_for: Callable[[int], int],
        kind: str,
        on_insufficient: OnInsufficientStock,
        notes: str,
        actor,
        reference_type: str,
        reference_id: UUID | None,
    ) -> tuple[StockBalance, StockMovement]:
        balance = _get_active_balance(balance_id, lock=True)
        previous = balance.quantity
        requested = delta_for(previous)
        if requested == 0:
            raise _NoChange(balance)

        new_quantity = previous + requested
        if new_quantity < 0:
            if on_insufficient is OnInsufficientStock.REJECT:
                raise InsufficientStockError(
                    detail=f'Insufficient stock. Current stock: {previous}, requested: {-requested}.',
                )
            new_quantity = 0

        updated = StockBalance.objects.filter(
            pk=balance.pk,
            version=balance.version,
            is_deleted=False,
        ).update(
            quantity=new_quantity,
            version=F('version') + 1,
            updated_by=_actor(actor),
            updated_at=timezone.now(),
        )
        if updated != 1:
            raise _StaleBalance()
        balance.refresh_from_db()

        movement = MovementLog.append(
            balance=balance,
            kind=kind,
            quantity=new_quantity - previous,
            requested_quantity=requested,
            previous_quantity=previous,
            new_quantity=new_quantity,
            notes=notes,
            actor=actor,
            reference_type=reference_type,
            reference_id=reference_id,
        )
        return balance, movement


# ---------------------------------------------------------------------------
# Balance records
# ---------------------------------------------------------------------------

class BalanceService:
    """Create, read, patch and soft-delete balance records."""

    @staticmethod
    def active_balances(*, product_id=None, warehouse_id=None):
        qs = StockBalance.objects.filter(is_deleted=False).select_related('product', 'warehouse')
        if product_id:
            qs = qs.filter(product_id=product_id)
        if warehouse_id:
            qs = qs.filter(warehouse_id=warehouse_id)
        return qs.order_by('-created_at')

    @staticmethod
    def find_active(product_id, variant_name: str | None, warehouse_id, *, lock: bool = False) -> StockBalance | None:
        qs = StockBalance.objects.filter(
            product_id=product_id,
            variant_name=normalize_variant(variant_name),
            warehouse_id=warehouse_id,
            is_deleted=False,
        )
        if lock:
            qs = qs.select_for_update()
        return qs.first()

    @staticmethod
    def get(balance_id) -> StockBalance:
        return _get_active_balance(balance_id)

    @staticmethod
    def list_balances(
        *,
        product_id=None,
        warehouse_id=None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Paginated listing for callers outside the HTTP layer."""
        if page < 1:
            raise BusinessRuleViolation(detail='page must be >= 1.')
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise BusinessRuleViolation(detail=f'limit must be between 1 and {MAX_PAGE_SIZE}.')

        paginator = Paginator(
            BalanceService.active_balances(product_id=product_id, warehouse_id=warehouse_id),
            limit,
        )
        try:
            items = list(paginator.page(page).object_list)
        except EmptyPage:
            items = []
        return {
            'items': items,
            'total': paginator.count,
            'page': page,
            'limit': limit,
            'total_pages': paginator.num_pages if paginator.count else 0,
        }

    @staticmethod
    @transaction.atomic
    def create(
        *,
        product_id,
        warehouse_id,
        variant_name: str | None = None,
        quantity: int = 0,
        reorder_point: int | None = None,
        actor=None,
    ) -> StockBalance:
        """
        Create the balance for a (product, variant, warehouse) triple.
        A positive opening quantity is ledgered as a purchase movement.
        """
        _require_non_negative(quantity, 'quantity')
        if reorder_point is None:
            reorder_point = settings.INVENTORY_DEFAULT_REORDER_POINT
        _require_non_negative(reorder_point, 'reorder_point')

        product = _get_product(product_id)
        warehouse = _get_warehouse(warehouse_id)
        variant = normalize_variant(variant_name)
        if variant and product.variant_names and variant not in product.variant_names:
            raise BusinessRuleViolation(detail=f'Unknown variant "{variant}" for product {product.title}.')

        if BalanceService.find_active(product.pk, variant, warehouse.pk):
            raise DuplicateResourceError(
                detail='Stock already exists for this product, variant and warehouse.',
            )
        try:
            with transaction.atomic():
                balance = StockBalance.objects.create(
                    product=product,
                    variant_name=variant,
                    warehouse=warehouse,
                    quantity=0,
                    reorder_point=reorder_point,
                    created_by=_actor(actor),
                )
        except IntegrityError:
            raise DuplicateResourceError(
                detail='Stock already exists for this product, variant and warehouse.',
            )

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_CREATE,
            model_name='StockBalance',
            object_id=str(balance.pk),
            new_values=AuditService.snapshot(balance),
        )
        logger.info(
            'StockBalance %s created product=%s variant=%s warehouse=%s',
            balance.pk, product.pk, variant or '-', warehouse.pk,
        )

        if quantity > 0:
            balance, _ = AdjustmentService.apply(
                balance_id=balance.pk,
                delta=quantity,
                kind=StockMovement.Kind.PURCHASE,
                notes='Opening balance',
                actor=actor,
            )
        else:
            ReconciliationService.sync_product_total(product.pk)
        return balance

    @staticmethod
    def patch(*, balance_id, actor=None, **fields) -> StockBalance:
        """
        reorder_point is a plain field edit. A quantity is a manual
        correction and goes through the ledger like any other change.
        """
        unknown = set(fields) - PATCHABLE_FIELDS
        if unknown:
            raise BusinessRuleViolation(detail=f'Fields not patchable: {", ".join(sorted(unknown))}.')

        reorder_point = fields.get('reorder_point')
        quantity = fields.get('quantity')
        if reorder_point is not None:
            _require_non_negative(reorder_point, 'reorder_point')
        if quantity is not None:
            _require_non_negative(quantity, 'quantity')

        with transaction.atomic():
            balance = _get_active_balance(balance_id, lock=True)
            if reorder_point is not None and reorder_point != balance.reorder_point:
                old_values = AuditService.snapshot(balance, fields=['reorder_point'])
                balance.reorder_point = reorder_point
                balance.updated_by = _actor(actor)
                balance.save(update_fields=['reorder_point', 'updated_by', 'updated_at'])
                AuditService.log(
                    actor=actor,
                    action=AUDIT_ACTION_UPDATE,
                    model_name='StockBalance',
                    object_id=str(balance.pk),
                    old_values=old_values,
                    new_values={'reorder_point': reorder_point},
                )
            if quantity is not None:
                balance, _ = AdjustmentService.set_quantity(
                    balance_id=balance.pk,
                    quantity=quantity,
                    actor=actor,
                )
        return balance

    @staticmethod
    def soft_delete(*, balance_id, actor=None) -> None:
        """Hide the balance; its movements stay in the log."""
        with transaction.atomic():
            balance = _get_active_balance(balance_id, lock=True)
            balance.soft_delete(user=_actor(actor))
            AuditService.log(
                actor=actor,
                action=AUDIT_ACTION_SOFT_DELETE,
                model_name='StockBalance',
                object_id=str(balance.pk),
                old_values={'quantity': balance.quantity},
            )
        logger.info('StockBalance %s soft-deleted', balance.pk)
        ReconciliationService.sync_product_total(balance.product_id)

    @staticmethod
    @transaction.atomic
    def bulk_receive(*, product_id, warehouse_id, variants: list[dict], actor=None) -> dict[str, list[StockBalance]]:
        """
        Stock several variants of one product into one warehouse. Existing
        balances are topped up through the ledger, missing ones created.
        Lines with quantity 0 are skipped.
        """
        for line in variants:
            _require_non_negative(line.get('quantity', 0), 'quantity')
        lines = [line for line in variants if line.get('quantity', 0) > 0]
        if not lines:
            raise BusinessRuleViolation(detail='No variants with quantity greater than 0 to add.')

        _get_product(product_id)
        _get_warehouse(warehouse_id)

        created: list[StockBalance] = []
        updated: list[StockBalance] = []
        for line in lines:
            existing = BalanceService.find_active(product_id, line.get('variant_name'), warehouse_id)
            if existing is None:
                created.append(BalanceService.create(
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                    variant_name=line.get('variant_name'),
                    quantity=line['quantity'],
                    reorder_point=line.get('reorder_point'),
                    actor=actor,
                ))
                continue
            if line.get('reorder_point') is not None:
                BalanceService.patch(balance_id=existing.pk, reorder_point=line['reorder_point'], actor=actor)
            balance, _ = AdjustmentService.apply(
                balance_id=existing.pk,
                delta=line['quantity'],
                kind=StockMovement.Kind.PURCHASE,
                notes='Bulk stock entry',
                actor=actor,
            )
            updated.append(balance)

        logger.info(
            'Bulk stock entry product=%s warehouse=%s: %d updated, %d created',
            product_id, warehouse_id, len(updated), len(created),
        )
        return {'created': created, 'updated': updated}


# ---------------------------------------------------------------------------
# Reconciliation & reporting
# ---------------------------------------------------------------------------

class ReconciliationService:
    """
    Product.total_stock is recomputed from active balances, never
    incremented. It is eventually consistent: a resync after every
    mutation plus the periodic beat task converge it to the true sum.
    """

    @staticmethod
    def sync_product_total(product_id) -> int:
        total = StockBalance.objects.filter(
            product_id=product_id,
            is_deleted=False,
        ).aggregate(total=Coalesce(Sum('quantity'), 0))['total']
        if not Product.objects.filter(pk=product_id).update(total_stock=total):
            raise ResourceNotFoundError(detail='Product not found.')
        logger.debug('Product %s total_stock synced to %d', product_id, total)
        return total

    @staticmethod
    def sync_all_product_totals() -> dict[str, int]:
        """Resync every product; products with no active balance converge to 0."""
        totals = dict(
            StockBalance.objects.filter(is_deleted=False)
            .values('product_id')
            .annotate(total=Sum('quantity'))
            .values_list('product_id', 'total')
        )
        corrected = 0
        products = Product.objects.only('id', 'total_stock')
        for product in products.iterator():
            total = totals.get(product.pk, 0)
            if product.total_stock != total:
                Product.objects.filter(pk=product.pk).update(total_stock=total)
                corrected += 1
        checked = products.count()
        logger.info('Product totals resynced: %d checked, %d corrected', checked, corrected)
        return {'checked': checked, 'corrected': corrected}

    @staticmethod
    def _cell(balance: StockBalance) -> dict[str, Any]:
        return {
            'stock_id': balance.pk,
            'warehouse_id': balance.warehouse_id,
            'warehouse_name': balance.warehouse.title,
            'quantity': balance.quantity,
            'reorder_point': balance.reorder_point,
            'is_low_stock': balance.is_low_stock,
        }

    @staticmethod
    def summarize() -> list[dict[str, Any]]:
        """
        Product -> variant -> warehouse matrix over active balances of
        non-deleted products, sorted by product title. Low and out-of-stock
        flags are derived here on every call.
        """
        balances = (
            StockBalance.objects.filter(is_deleted=False, product__is_deleted=False)
            .select_related('product', 'warehouse')
            .order_by('product__title', 'product_id', 'variant_name', 'warehouse__title', 'warehouse_id')
        )

        summary = []
        for _, product_balances in groupby(balances, key=attrgetter('product_id')):
            product_balances = list(product_balances)
            product = product_balances[0].product

            variants = []
            for variant_name, cells in groupby(product_balances, key=attrgetter('variant_name')):
                warehouses = [ReconciliationService._cell(b) for b in cells]
                variants.append({
                    'variant_name': display_variant(variant_name),
                    'total_stock': sum(c['quantity'] for c in warehouses),
                    'warehouses': warehouses,
                })

            all_cells = [c for v in variants for c in v['warehouses']]
            summary.append({
                'product_id': product.pk,
                'product': {
                    'id': product.pk,
                    'title': product.title,
                    'slug': product.slug,
                    'thumbnail': product.thumbnail,
                    'variants': product.variants,
                },
                'total_stock': sum(v['total_stock'] for v in variants),
                'variant_count': len(variants),
                'warehouse_count': len({c['warehouse_id'] for c in all_cells}),
                'has_low_stock': any(c['is_low_stock'] for c in all_cells),
                'has_out_of_stock': any(c['quantity'] == 0 for c in all_cells),
                'variants': variants,
            })
        return summary

    @staticmethod
    def stats(summary: list[dict[str, Any]] | None = None) -> dict[str, int]:
        if summary is None:
            summary = ReconciliationService.summarize()
        return {
            'total_products': len(summary),
            'low_stock_count': sum(1 for s in summary if s['has_low_stock']),
            'out_of_stock_count': sum(1 for s in summary if s['has_out_of_stock']),
        }
