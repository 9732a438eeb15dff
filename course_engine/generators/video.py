"""Video OLX: one self-closing <video> element per block."""

import json
from typing import Dict, Mapping
from xml.etree import ElementTree as ET

from course_engine.model import VideoBlock
from course_engine.olx import prettify_xml


def generate_video_blocks(video_blocks: Mapping[str, VideoBlock]) -> Dict[str, str]:
    files = {}
    for block_id, block in video_blocks.items():
        video = ET.Element("video", url_name=block_id, display_name=block.title)
        if block.youtube_id:
            video.set("youtube", f"1.00:{block.youtube_id}")
            video.set("youtube_id_1_0", block.youtube_id)
        video.set("html5_sources", json.dumps([block.html5_url] if block.html5_url else []))
        video.set("start_time", block.start_time or "00:00:00")
        video.set("end_time", block.end_time or "00:00:00")
        video.set("edx_video_id", "")
        files[f"video/{block_id}.xml"] = prettify_xml(video)
    return files
