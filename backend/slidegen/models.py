from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from slidegen.database import Base


class GeneratedImage(Base):
    __tablename__ = "generated_images"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String(255), nullable=False, index=True)
    url = Column(String(500), nullable=False)
    source = Column(String(20), nullable=False)  # generate | batch
    template = Column(String(50), nullable=True)
    slide_number = Column(Integer, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    metadata_json = Column(JSON, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "filename": self.filename,
            "url": self.url,
            "source": self.source,
            "template": self.template,
            "slideNumber": self.slide_number,
            "width": self.width,
            "height": self.height,
            "createdAt": self.created_at.isoformat() if self.created_at else "",
        }
