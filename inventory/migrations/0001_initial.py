import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StockBalance',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_deleted', models.BooleanField(db_index=True, default=False, verbose_name='deleted')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='deleted at')),
                ('variant_name', models.CharField(blank=True, default='', max_length=255, verbose_name='variant name')),
                ('quantity', models.PositiveIntegerField(default=0, verbose_name='quantity')),
                ('reorder_point', models.PositiveIntegerField(default=10, help_text='At or below this quantity the cell is reported as low stock.', verbose_name='reorder point')),
                ('version', models.PositiveIntegerField(default=0, verbose_name='version')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='updated by')),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='deleted by')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_balances', to='catalog.product', verbose_name='product')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_balances', to='catalog.warehouse', verbose_name='warehouse')),
            ],
            options={
                'verbose_name': 'stock balance',
                'verbose_name_plural': 'stock balances',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['product', 'is_deleted'], name='balance_product_idx'),
                    models.Index(fields=['warehouse', 'is_deleted'], name='balance_warehouse_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('product', 'variant_name', 'warehouse'), name='unique_active_stock_balance'),
                    models.CheckConstraint(condition=models.Q(('quantity__gte', 0)), name='stock_balance_quantity_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockMovement',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('variant_name', models.CharField(blank=True, default='', max_length=255, verbose_name='variant name')),
                ('kind', models.CharField(choices=[('purchase', 'Purchase'), ('sale', 'Sale'), ('adjustment', 'Adjustment'), ('transfer', 'Transfer'), ('return', 'Return'), ('damage', 'Damage')], db_index=True, max_length=16, verbose_name='kind')),
                ('sequence', models.PositiveIntegerField(help_text='Balance version produced by this write; orders movements per balance.', verbose_name='sequence')),
                ('quantity', models.IntegerField(verbose_name='quantity')),
                ('requested_quantity', models.IntegerField(verbose_name='requested quantity')),
                ('previous_quantity', models.PositiveIntegerField(verbose_name='previous quantity')),
                ('new_quantity', models.PositiveIntegerField(verbose_name='new quantity')),
                ('reference_id', models.UUIDField(blank=True, help_text='Source record: order, purchase order, etc.', null=True, verbose_name='reference ID')),
                ('reference_type', models.CharField(blank=True, max_length=100, verbose_name='reference type')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('balance', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='movements', to='inventory.stockbalance', verbose_name='balance')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL, verbose_name='created by')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_movements', to='catalog.product', verbose_name='product')),
                ('warehouse', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='stock_movements', to='catalog.warehouse', verbose_name='warehouse')),
            ],
            options={
                'verbose_name': 'stock movement',
                'verbose_name_plural': 'stock movements',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['product', 'created_at'], name='movement_product_idx'),
                    models.Index(fields=['warehouse', 'created_at'], name='movement_warehouse_idx'),
                    models.Index(fields=['kind', 'created_at'], name='movement_kind_idx'),
                    models.Index(fields=['reference_type', 'reference_id'], name='movement_reference_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('balance', 'sequence'), name='unique_movement_sequence_per_balance'),
                    models.CheckConstraint(condition=models.Q(('new_quantity', models.F('previous_quantity') + models.F('quantity'))), name='stock_movement_delta_consistent'),
                ],
            },
        ),
    ]
