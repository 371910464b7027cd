"""Local repository — load/create/save/delete over the SQLAlchemy session.

Every service that touches local records takes one of these in its
constructor, so storage access is always the injected instance.
"""

from stripe_registration.extensions import db


class Repository:
    """Generic entity storage bound to a SQLAlchemy session."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def load(self, model, entity_id):
        return self.session.get(model, entity_id)

    def load_by_properties(self, model, **properties):
        """All rows of model whose columns equal the given values."""
        return (
            self.session.query(model)
            .filter_by(**properties)
            .order_by(model.id)
            .all()
        )

    def load_multiple(self, model):
        return self.session.query(model).order_by(model.id).all()

    def create(self, model, **values):
        """Insert a new row and commit. Returns the entity."""
        entity = model(**values)
        self.session.add(entity)
        self.session.commit()
        return entity

    def save(self, entity):
        self.session.add(entity)
        self.session.commit()
        return entity

    def delete(self, model, entities):
        """Delete entities of model in one batch (single commit)."""
        for entity in entities:
            if not isinstance(entity, model):
                raise TypeError(f"{entity!r} is not a {model.__name__}")
            self.session.delete(entity)
        self.session.commit()
