"""Initial schema: profiles, recipes, ingredients, meal plans, pantry

Revision ID: 3b7c9e2a41d0
Revises:
Create Date: 2026-10-19 10:12:44.118302

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7c9e2a41d0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('username', sa.String(length=80), nullable=True),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('dietary_preferences', sa.JSON(), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
    )
    op.create_index('ix_profiles_email', 'profiles', ['email'], unique=True)

    op.create_table(
        'ingredients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ingredients_name', 'ingredients', ['name'], unique=True)
    op.create_index('ix_ingredients_category', 'ingredients', ['category'], unique=False)

    op.create_table(
        'recipes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cuisine_type', sa.String(length=50), nullable=True),
        sa.Column('difficulty', sa.String(length=10), nullable=True),
        sa.Column('prep_time', sa.Integer(), nullable=True),
        sa.Column('cooking_time', sa.Integer(), nullable=True),
        sa.Column('servings', sa.Integer(), nullable=False),
        sa.Column('instructions', sa.JSON(), nullable=False),
        sa.Column('nutritional_info', sa.JSON(), nullable=True),
        sa.Column('tips', sa.JSON(), nullable=False),
        sa.Column('image_url', sa.String(length=255), nullable=True),
        sa.Column('is_favorite', sa.Boolean(), nullable=False),
        sa.Column('ai_generated', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recipes_user_id', 'recipes', ['user_id'], unique=False)
    op.create_index('ix_recipes_cuisine_type', 'recipes', ['cuisine_type'], unique=False)
    op.create_index('ix_recipes_created_at', 'recipes', ['created_at'], unique=False)

    op.create_table(
        'recipe_ingredients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('ingredient_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.String(length=100), nullable=False),
        sa.Column('is_optional', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_recipe_ingredients_recipe_id', 'recipe_ingredients', ['recipe_id'], unique=False)
    op.create_index('ix_recipe_ingredients_ingredient_id', 'recipe_ingredients', ['ingredient_id'], unique=False)

    op.create_table(
        'meal_plans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=True),
        sa.Column('custom_meal_name', sa.String(length=200), nullable=True),
        sa.Column('planned_date', sa.Date(), nullable=False),
        sa.Column('meal_type', sa.String(length=20), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'planned_date', 'meal_type', name='uq_meal_plan_slot'),
        sa.CheckConstraint(
            '(recipe_id IS NULL) <> (custom_meal_name IS NULL)',
            name='ck_meal_plan_recipe_or_custom',
        ),
    )
    op.create_index('ix_meal_plans_user_id', 'meal_plans', ['user_id'], unique=False)
    op.create_index('ix_meal_plans_recipe_id', 'meal_plans', ['recipe_id'], unique=False)
    op.create_index('ix_meal_plans_planned_date', 'meal_plans', ['planned_date'], unique=False)

    op.create_table(
        'user_pantry',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('ingredient_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.String(length=100), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('added_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['ingredient_id'], ['ingredients.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'ingredient_id', name='uq_pantry_user_ingredient'),
    )
    op.create_index('ix_user_pantry_user_id', 'user_pantry', ['user_id'], unique=False)


def downgrade():
    op.drop_index('ix_user_pantry_user_id', table_name='user_pantry')
    op.drop_table('user_pantry')
    op.drop_index('ix_meal_plans_planned_date', table_name='meal_plans')
    op.drop_index('ix_meal_plans_recipe_id', table_name='meal_plans')
    op.drop_index('ix_meal_plans_user_id', table_name='meal_plans')
    op.drop_table('meal_plans')
    op.drop_index('ix_recipe_ingredients_ingredient_id', table_name='recipe_ingredients')
    op.drop_index('ix_recipe_ingredients_recipe_id', table_name='recipe_ingredients')
    op.drop_table('recipe_ingredients')
    op.drop_index('ix_recipes_created_at', table_name='recipes')
    op.drop_index('ix_recipes_cuisine_type', table_name='recipes')
    op.drop_index('ix_recipes_user_id', table_name='recipes')
    op.drop_table('recipes')
    op.drop_index('ix_ingredients_category', table_name='ingredients')
    op.drop_index('ix_ingredients_name', table_name='ingredients')
    op.drop_table('ingredients')
    op.drop_index('ix_profiles_email', table_name='profiles')
    op.drop_table('profiles')
