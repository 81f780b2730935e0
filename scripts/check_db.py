#!/usr/bin/env python
"""Quick script to verify database contents."""

import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
load_dotenv()

from db.database import SessionLocal
from db.models import ClusterModel, NotificationModel, PostModel, ProcessingJobModel, PromptModel

db = SessionLocal()

# Posts
count = db.query(PostModel).count()
processed = db.query(PostModel).filter(PostModel.processed == True).count()
print(f"Posts: {count} total, {processed} clustered")

for platform in ("youtube", "reddit"):
    n = db.query(PostModel).filter(PostModel.platform == platform).count()
    print(f"  {platform}: {n}")

# Clusters
clusters = db.query(ClusterModel).count()
approved = db.query(ClusterModel).filter(ClusterModel.is_approved == True).count()
print(f"\nClusters: {clusters} total, {approved} approved")

top = db.query(ClusterModel).order_by(ClusterModel.trend_score.desc()).first()
if top:
    print(f"\nTop cluster:")
    print(f"  Name: {top.name}")
    print(f"  Score: {top.trend_score} ({top.status})")
    print(f"  Posts: {len(top.post_ids or [])}")
    print(f"  Prompt: {top.generated_prompt[:80]}...")

print(f"\nPrompts published: {db.query(PromptModel).count()}")
print(f"Notifications: {db.query(NotificationModel).count()}")

last_job = db.query(ProcessingJobModel).order_by(ProcessingJobModel.started_at.desc()).first()
if last_job:
    print(f"\nLast job: {last_job.job_type} {last_job.status} at {last_job.started_at}")

db.close()
