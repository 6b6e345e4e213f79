# app/shared/database/models.py
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Text,
    Numeric, ForeignKey, CheckConstraint, JSON, func
)
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime, timezone

Base = declarative_base()


def utcnow() -> datetime:
    """Fecha/hora actual en UTC (naive) para persistencia"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =====================================================
# MIXIN PARA TIMESTAMPS
# =====================================================
class TimestampMixin:
    """Mixin que agrega campos created_at y updated_at"""
    created_at = Column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())


# =====================================================
# USUARIOS (TENANT / DUEÑO DEL NEGOCIO)
# =====================================================

class User(Base):
    """Cuenta del negocio. Su id es la clave de tenant (owner_id) de todas las entidades"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True)
    business_name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    # Relationships
    collaborators = relationship("Collaborator", back_populates="owner")
    products = relationship("Product", back_populates="owner")


# =====================================================
# COLABORADORES
# =====================================================

class Collaborator(Base, TimestampMixin):
    """Modelo de Colaborador (vendedor / trabajador)"""
    __tablename__ = "collaborators"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    phone = Column(String(50))
    email = Column(String(255))
    department = Column(String(50))
    salary = Column(Numeric(12, 2), nullable=False, default=0)
    registered_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint('salary >= 0', name='ck_collaborators_salary_positive'),
    )

    # Relationships
    owner = relationship("User", back_populates="collaborators")
    sales = relationship("Sale", back_populates="collaborator")
    payments = relationship("Payment", back_populates="collaborator")
    personnel_records = relationship("PersonnelRecord", back_populates="collaborator")
    payroll_payments = relationship("PayrollPayment", back_populates="collaborator")


# =====================================================
# PRODUCTOS E INVENTARIO
# =====================================================

class Product(Base, TimestampMixin):
    """Modelo de Producto con contadores de stock"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    unit_price = Column(Numeric(12, 2), nullable=False)
    purchase_price = Column(Numeric(12, 2))
    # total_quantity = sold_quantity + remaining_quantity en todo momento
    total_quantity = Column(Integer, nullable=False, default=0)
    sold_quantity = Column(Integer, nullable=False, default=0)
    remaining_quantity = Column(Integer, nullable=False, default=0)
    stocked_at = Column(DateTime, default=utcnow)
    version = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint('sold_quantity >= 0', name='ck_products_sold_positive'),
        CheckConstraint('remaining_quantity >= 0', name='ck_products_remaining_positive'),
    )
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    owner = relationship("User", back_populates="products")
    sale_items = relationship("SaleItem", back_populates="product")
    movements = relationship("InventoryMovement", back_populates="product", cascade="all, delete-orphan")


class InventoryMovement(Base):
    """Bitácora de movimientos de stock"""
    __tablename__ = "inventory_movements"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    change_type = Column(String(50), nullable=False)
    quantity = Column(Integer, nullable=False)
    remaining_before = Column(Integer)
    remaining_after = Column(Integer)
    reference_id = Column(Integer)
    notes = Column(String(255))
    created_at = Column(DateTime, nullable=False, default=utcnow)

    # Relationships
    product = relationship("Product", back_populates="movements")


# =====================================================
# VENTAS
# =====================================================

class Sale(Base, TimestampMixin):
    """Modelo de Venta con su libro de deuda"""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    collaborator_id = Column(Integer, ForeignKey("collaborators.id"), nullable=False, index=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    amount_returned = Column(Numeric(12, 2), nullable=False, default=0)
    quantity_returned = Column(Integer, nullable=False, default=0)
    payment_status = Column(String(20), nullable=False, default='pending')
    sale_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    notes = Column(Text)
    version = Column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint('amount_paid >= 0', name='ck_sales_paid_positive'),
        CheckConstraint('amount_paid <= total_amount', name='ck_sales_paid_le_total'),
    )
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    collaborator = relationship("Collaborator", back_populates="sales")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="sale")
    returns = relationship("SaleReturn", back_populates="sale")


class SaleItem(Base):
    """Modelo de Item (detalle) de Venta"""
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    __table_args__ = (
        CheckConstraint('quantity >= 1', name='ck_sale_items_quantity_positive'),
    )

    # Relationships
    sale = relationship("Sale", back_populates="items")
    product = relationship("Product", back_populates="sale_items")


# =====================================================
# COBROS
# =====================================================

class Payment(Base):
    """Modelo de Cobro aplicado contra la deuda de una venta"""
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    collaborator_id = Column(Integer, ForeignKey("collaborators.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    amount_paid = Column(Numeric(12, 2), nullable=False)
    # 'partial' | 'total': si este cobro saldó la deuda pendiente al momento de registrarse
    payment_status = Column(String(20), nullable=False)
    cash = Column(Numeric(12, 2), nullable=False, default=0)
    digital_wallet = Column(Numeric(12, 2), nullable=False, default=0)
    contingency = Column(Numeric(12, 2), nullable=False, default=0)
    payment_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    notes = Column(Text)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    __table_args__ = (
        CheckConstraint('amount_paid > 0', name='ck_payments_amount_positive'),
    )

    # Relationships
    sale = relationship("Sale", back_populates="payments")
    collaborator = relationship("Collaborator", back_populates="payments")


# =====================================================
# DEVOLUCIONES
# =====================================================

class SaleReturn(Base):
    """Modelo de Devolución de unidades vendidas"""
    __tablename__ = "sale_returns"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity_returned = Column(Integer, nullable=False)
    return_amount = Column(Numeric(12, 2), nullable=False, default=0)
    # Parte del monto devuelto que excedía la deuda y se reembolsó de lo ya pagado
    refunded_amount = Column(Numeric(12, 2), nullable=False, default=0)
    reason = Column(Text, nullable=False)
    return_date = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, server_default=func.current_timestamp())

    __table_args__ = (
        CheckConstraint('quantity_returned >= 1', name='ck_sale_returns_quantity_positive'),
        CheckConstraint('return_amount >= 0', name='ck_sale_returns_amount_positive'),
    )

    # Relationships
    sale = relationship("Sale", back_populates="returns")
    product = relationship("Product")


# =====================================================
# GESTIÓN PERSONAL Y PAGOS REALIZADOS
# =====================================================

class PersonnelRecord(Base, TimestampMixin):
    """Registro de gestión personal (jornal, faltantes, adelantos)"""
    __tablename__ = "personnel_records"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    collaborator_id = Column(Integer, ForeignKey("collaborators.id"), nullable=False, index=True)
    record_date = Column(DateTime, nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False, default=0)
    shortage = Column(Numeric(12, 2), nullable=False, default=0)
    advance = Column(Numeric(12, 2), nullable=False, default=0)
    daily_pay = Column(Numeric(12, 2), nullable=False, default=0)
    days_worked = Column(Integer, nullable=False, default=1)

    # Relationships
    collaborator = relationship("Collaborator", back_populates="personnel_records")

    @property
    def net_earned(self):
        return (self.daily_pay or 0) - (self.shortage or 0) - (self.advance or 0)


class PayrollPayment(Base):
    """Pago realizado a un colaborador (liquidación de gestión personal)"""
    __tablename__ = "payroll_payments"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    collaborator_id = Column(Integer, ForeignKey("collaborators.id"), nullable=False, index=True)
    payment_date = Column(DateTime, nullable=False, default=utcnow, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(20), nullable=False, default='efectivo')
    period_start = Column(Date)
    period_end = Column(Date)
    included_record_ids = Column(JSON, default=list)
    notes = Column(Text, default='')
    status = Column(String(20), nullable=False, default='paid')
    created_at = Column(DateTime, server_default=func.current_timestamp())

    __table_args__ = (
        CheckConstraint('amount > 0', name='ck_payroll_payments_amount_positive'),
    )

    # Relationships
    collaborator = relationship("Collaborator", back_populates="payroll_payments")
